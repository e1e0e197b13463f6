"""
Logging for the Genetic Algorithm Engine

One named logger tree ("GA", "GA.Pool", "GA.Reporter", ...) on top of the
standard logging module. Messages carry keyword context rendered as
`message | key=value | key=value`; console output is optionally colored and
a timestamped log file can be added.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional


class GAFormatter(logging.Formatter):
    """`LEVEL | logger | message` lines, with the level colored on a terminal."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True, include_timestamp: bool = True):
        self.use_colors = use_colors and sys.stdout.isatty()
        fmt = '%(levelname)-8s | %(name)s | %(message)s'
        if include_timestamp:
            fmt = '[%(asctime)s] ' + fmt
        super().__init__(fmt, '%H:%M:%S' if include_timestamp else None)

    def format(self, record):
        if self.use_colors and record.levelname in self.COLORS:
            record = logging.makeLogRecord(record.__dict__)
            record.levelname = f"{self.COLORS[record.levelname]}{record.levelname}{self.RESET}"
        return super().format(record)


class GALogger:
    """
    Logger of the GA engine.

    The root instance owns the handlers; component loggers created with
    `child()` propagate to it and share its level.
    """

    def __init__(self, name: str = "GA", level: str = "INFO",
                 log_to_file: bool = True, output_dir: str = "logs",
                 console_colors: bool = True):
        """
        Args:
            name: Logger name
            level: DEBUG, INFO, WARNING, ERROR or CRITICAL
            log_to_file: Also write `<output_dir>/ga_run_<timestamp>.log`
            output_dir: Directory for the log file
            console_colors: Color the level on a terminal
        """
        self.name = name
        self.log_file = None
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        self.logger.propagate = False
        self.logger.handlers.clear()

        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(GAFormatter(use_colors=console_colors, include_timestamp=False))
        self.logger.addHandler(console)

        if log_to_file:
            self._add_file_handler(output_dir)

    def _add_file_handler(self, output_dir: str):
        log_dir = Path(output_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"ga_run_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

        handler = logging.FileHandler(log_file)
        handler.setFormatter(GAFormatter(use_colors=False, include_timestamp=True))
        self.logger.addHandler(handler)
        self.log_file = str(log_file)

    def child(self, name: str) -> "GALogger":
        """Component logger under this one."""
        component = GALogger.__new__(GALogger)
        component.name = f"{self.name}.{name}"
        component.log_file = self.log_file
        component.logger = self.logger.getChild(name)
        component.logger.setLevel(logging.NOTSET)
        component.logger.propagate = True
        return component

    def _log(self, level: int, message: str, exception: Exception = None, **kwargs):
        if not self.logger.isEnabledFor(level):
            return
        parts = [message]
        parts.extend(f"{k}={v}" for k, v in kwargs.items())
        if exception is not None:
            parts.append(f"Exception: {type(exception).__name__}: {exception}")
        self.logger.log(level, " | ".join(parts))

    def debug(self, message: str, **kwargs):
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs):
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs):
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, exception: Exception = None, **kwargs):
        self._log(logging.ERROR, message, exception, **kwargs)

    def critical(self, message: str, exception: Exception = None, **kwargs):
        self._log(logging.CRITICAL, message, exception, **kwargs)

    # Run events
    def log_generation_start(self, generation: int, pool_size: int):
        self.debug(f"Starting generation {generation}", pool_size=pool_size)

    def log_generation_complete(self, generation: int, best_fitness: float,
                                average: float, mutations: int):
        self.debug(f"Generation {generation} complete",
                   best_fitness=f"{best_fitness:.6g}",
                   average=f"{average:.6g}",
                   mutations=mutations)

    def log_convergence(self, generation: int, reason: str):
        self.info(f"Convergence detected at iteration {generation}", reason=reason)

    def log_scale_factor(self, scale_factor: float):
        """Log a change of the proportional fitness scale factor."""
        self.debug("New scale factor", scale_factor=f"{scale_factor:g}")

    def log_config_warning(self, line_number: int, message: str):
        """Log an ignored configuration line."""
        self.warning(f"Config line {line_number}: {message}")

    def log_config_summary(self, config):
        self.info("GA configuration",
                  ga=config.ga,
                  datatype=config.datatype,
                  pool_size=config.pool_size,
                  chrom_len=config.chrom_len,
                  max_iter=config.max_iter,
                  selection=config.selection,
                  crossover=config.crossover,
                  x_rate=config.x_rate,
                  mutation=config.mutation,
                  mu_rate=config.mu_rate,
                  replacement=config.replacement)

    def log_parallel_processing(self, worker_count: int, task_count: int,
                                time_taken: float):
        rate = f"{task_count / time_taken:.1f}" if time_taken > 0 else "n/a"
        self.debug("Parallel evaluation complete",
                   workers=worker_count,
                   tasks=task_count,
                   time_taken=f"{time_taken:.2f}s",
                   tasks_per_second=rate)


_global_logger: Optional[GALogger] = None


def get_logger(name: str = "GA") -> GALogger:
    """The root logger, or a component logger under it."""
    global _global_logger
    if _global_logger is None:
        _global_logger = GALogger(log_to_file=False)
    if name == _global_logger.name:
        return _global_logger
    return _global_logger.child(name)


def setup_logging(level: str = "INFO", log_to_file: bool = True,
                  output_dir: str = "logs", console_colors: bool = True) -> GALogger:
    """
    (Re)configure the root logger.

    Component loggers obtained earlier keep working: they propagate to the
    reconfigured root by name.
    """
    global _global_logger
    _global_logger = GALogger(
        level=level,
        log_to_file=log_to_file,
        output_dir=output_dir,
        console_colors=console_colors
    )
    return _global_logger
