"""
Logging configuration with rotating file handlers and automatic prefix tagging
"""
import os
import logging
import inspect
from pathlib import Path
from logging.handlers import RotatingFileHandler
from core.config import app_config, PROJECT_ROOT


class AutoPrefixLogger:
    """Logger wrapper that prefixes each message with the calling class or function name"""

    def __init__(self, base_logger):
        self.base_logger = base_logger
        self._log_methods = {'debug', 'info', 'warning', 'error', 'critical', 'exception'}

    def _get_caller_name(self):
        """Get caller name for automatic prefix"""
        try:
            # Call stack: [current, _format_message, log_method, actual_caller, ...]
            stack = inspect.stack(context=0)
            if len(stack) < 4:
                return None
            caller_frame = stack[3].frame

            # Class method: use class name
            if 'self' in caller_frame.f_locals:
                return caller_frame.f_locals['self'].__class__.__name__

            # Static/class method: use class name
            elif 'cls' in caller_frame.f_locals:
                return caller_frame.f_locals['cls'].__name__

            # Regular function: use function name (skip <module>)
            else:
                func_name = caller_frame.f_code.co_name
                if func_name != '<module>':
                    return func_name
                return None

        except Exception:
            return None

    def _format_message(self, msg):
        """Format message with automatic prefix"""
        caller_name = self._get_caller_name()
        if caller_name:
            return f"[{caller_name}] {msg}"
        return msg

    def __getattr__(self, name):
        """Dynamically handle logging method calls"""
        if name == 'log':
            def log_at(level, msg, *args, **kwargs):
                return self.base_logger.log(level, self._format_message(msg), *args, **kwargs)
            return log_at

        if name in self._log_methods:
            base_method = getattr(self.base_logger, name)

            def log_method(msg, *args, **kwargs):
                formatted_msg = self._format_message(msg)
                return base_method(formatted_msg, *args, **kwargs)

            return log_method

        # For non-logging methods, delegate to base logger
        return getattr(self.base_logger, name)


def setup_logger(layer_name: str = 'app') -> AutoPrefixLogger:
    """
    Setup logger with console and rotating file handlers.

    Args:
        layer_name: Layer name for the logger (e.g., 'app', 'api.well_known', 'core.resources')

    Returns:
        AutoPrefixLogger instance with automatic prefix functionality
    """
    base_logger = logging.getLogger(layer_name)

    # Avoid duplicate handlers if logger already exists
    if base_logger.handlers:
        return AutoPrefixLogger(base_logger)

    debug_mode = app_config.server_config['debug']
    base_logger.setLevel(logging.DEBUG if debug_mode else logging.INFO)

    # File handlers only when LOG_TO_FILE=true
    log_to_file = os.getenv('LOG_TO_FILE', 'false').lower() == 'true'

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(logging.DEBUG if debug_mode else logging.INFO)
    base_logger.propagate = False  # Prevent propagation to avoid duplicate logs
    base_logger.addHandler(console_handler)

    if log_to_file:
        log_dir = Path(os.getenv('LOG_DIR', str(PROJECT_ROOT / 'logs')))
        log_dir.mkdir(parents=True, exist_ok=True)

        # One rotating file per process; access lines and resolution traces land together
        file_handler = RotatingFileHandler(
            log_dir / 'edge.log',
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(logging.DEBUG if debug_mode else logging.INFO)
        base_logger.addHandler(file_handler)

    return AutoPrefixLogger(base_logger)


# Process-level logger used by app.py for startup and shutdown lines
logger = setup_logger('app')
