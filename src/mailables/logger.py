# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Logging utilities for the mailables package.

This module provides a centralized logging helper. The actual logging setup
(level, handlers, format) belongs to the host application, typically via
``logging.basicConfig()`` in its entry point, to avoid duplicate handlers.

Example:
    Typical usage in a module::

        from mailables.logger import get_logger

        logger = get_logger("mailables.transports.smtp")
        logger.info("Message %s accepted", message_id)
"""

import logging


def get_logger(name: str = "mailables") -> logging.Logger:
    """Retrieve a logger instance.

    This function returns a standard library logger with the specified name.
    It does not configure handlers or formatters; that responsibility lies
    with the application entry point.

    Args:
        name: The logger name. Defaults to "mailables".

    Returns:
        A ``logging.Logger`` instance bound to the given name.
    """
    return logging.getLogger(name)
