"""
Structured logger used by the artifact fetcher.

Every line is emitted as a single JSON object carrying the caller location and
the log category, so that editor log consoles can filter fetcher output.
"""

import inspect
import json
import logging
from enum import Enum

from pydantic import BaseModel


class LogCategory(str, Enum):
    """Categories used to tag fetcher log lines."""

    EDITOR = "editor"
    NETWORK = "network"
    FILESYSTEM = "filesystem"


class LogLine(BaseModel):
    """
    Represents a line in the fetcher log
    """

    caller_file: str
    caller_name: str
    caller_line: int
    category: LogCategory
    message: str


class FetcherLogger:
    """
    Logger class for the artifact fetcher
    """

    def __init__(self, name: str = "artifact_fetcher") -> None:
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG)

    def log(
        self,
        message: str,
        level: int,
        category: LogCategory = LogCategory.EDITOR,
    ) -> None:
        """
        Log the message at the given level, tagged with a category.
        """
        message = message.replace("\n", " ")

        # Collect details about the caller
        curframe = inspect.currentframe()
        calframe = inspect.getouterframes(curframe, 2)
        caller_file = calframe[1][1].split("/")[-1]
        caller_line = calframe[1][2]
        caller_name = calframe[1][3]

        log_line = LogLine(
            caller_file=caller_file,
            caller_name=caller_name,
            caller_line=caller_line,
            category=category,
            message=message,
        )

        self.logger.log(
            level=level,
            msg=json.dumps(log_line.model_dump(mode="json")),
        )
