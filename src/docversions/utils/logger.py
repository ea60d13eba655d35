import logging
import os
import sys
import traceback
from logging.handlers import RotatingFileHandler
from types import TracebackType
from typing import Optional, Type

import asyncclick as click


class DocVersionsLog:
    LOGGER_NAME = "DocVersions"
    LOG_DIR = os.path.expanduser("~/.docversions/logs")
    LOG_FILE = os.path.join(LOG_DIR, "docversions.log")
    LOG_LEVEL = logging.INFO
    MAX_BYTES = 1048576 * 10  # 10 MB
    BACKUP_COUNT = 5

    @staticmethod
    def setup_logger(
        name: Optional[str] = None,
        level: Optional[int] = LOG_LEVEL,
        debug: bool = False,
    ) -> logging.Logger:
        """
        Configures and returns a logger. If the logger is already configured, it ensures no duplicate handlers.

        :param name: Name of the logger, defaults to "DocVersions".
        :type name: :py:obj:`~typing.Optional` [:py:class:`str`]
        :param level: Logging level of the file handler, defaults to INFO if not specified.
        :type level: :py:obj:`~typing.Optional` [:py:class:`int`]
        :param debug: Whether to enable debug logging for console, defaults to False.
        :type debug: :py:class:`bool`
        :return: The configured logger.
        :rtype: :py:obj:`~logging.Logger`
        """
        logger_name = name if name else DocVersionsLog.LOGGER_NAME
        os.makedirs(DocVersionsLog.LOG_DIR, exist_ok=True)
        logger = logging.getLogger(logger_name)

        if not logger.hasHandlers():
            file_handler = RotatingFileHandler(
                DocVersionsLog.LOG_FILE,
                maxBytes=DocVersionsLog.MAX_BYTES,
                backupCount=DocVersionsLog.BACKUP_COUNT,
            )
            file_handler.setFormatter(
                logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
            )
            file_handler.setLevel(level or DocVersionsLog.LOG_LEVEL)
            logger.addHandler(file_handler)

            # Console handler only when running a debug build
            if debug:
                console_handler = logging.StreamHandler(sys.stdout)
                console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
                console_handler.setLevel(logging.DEBUG)
                logger.addHandler(console_handler)

            logger.setLevel(logging.DEBUG)  # Capture all messages, delegate to handlers

        return logger

    @staticmethod
    def setup_child_logger(childName: str, loggerName: Optional[str] = None) -> logging.Logger:
        """
        Setup a child logger for a specified context.

        :param childName: The name of the child logger.
        :type childName: :py:class:`str`
        :param loggerName: The name of the parent logger, defaults to "DocVersions".
        :type loggerName: :py:class:`str`
        :return: The configured child logger.
        :rtype: :py:obj:`~logging.Logger`
        """
        name = loggerName if loggerName else DocVersionsLog.LOGGER_NAME
        return logging.getLogger(name).getChild(childName)

    @staticmethod
    def custom_excepthook(
        exc_type: Type[BaseException],
        exc_value: BaseException,
        exc_traceback: Optional[TracebackType],
    ) -> None:
        """
        A custom exception handler for unhandled exceptions, intended to be assigned to ``sys.excepthook``.

        :param exc_type: The class of the exception raised.
        :type exc_type: :py:obj:`~typing.Type` of :py:class:`BaseException`
        :param exc_value: The instance of the exception raised.
        :type exc_value: :py:class:`BaseException`
        :param exc_traceback: The traceback object associated with the exception.
        :type exc_traceback: :py:obj:`~typing.Optional` of :py:obj:`~types.TracebackType`
        """
        parent_logger = logging.getLogger(DocVersionsLog.LOGGER_NAME)
        child_logger = parent_logger.getChild("UnhandledException")

        if issubclass(exc_type, KeyboardInterrupt):
            child_logger.info("User interrupted the process.")
            sys.exit(130)  # SIGINT

        formatted_traceback = "".join(
            traceback.format_exception(exc_type, exc_value, exc_traceback)
        )
        child_logger.error(
            f"Unhandled exception: {exc_type.__name__}: {exc_value}\n{formatted_traceback}"
        )

        click.echo(
            click.style(f"Error: {exc_type.__name__}: {exc_value}", fg="red", bold=True),
            err=True,
        )
        click.echo(
            f"For more details, please check the log file at: '{DocVersionsLog.LOG_FILE}'",
            err=True,
        )


class LogMe:
    def __init__(self, class_name: str):
        """
        A wrapper class around a child of the ``DocVersions`` logger.

        Console output is left to the CLI, which reports errors through :func:`format_err`
        and unparseable versions through :mod:`warnings`.

        :param class_name: The name of the class for which the logger is being set up.
        :type class_name: :py:class:`str`
        """
        self.logger = DocVersionsLog.setup_child_logger(class_name)

    def debug(self, msg: str):
        self.logger.debug(msg)

    def info(self, msg: str):
        self.logger.info(msg)

    def error(self, msg: str):
        self.logger.error(msg)
