"""
Configuration Management for the Genetic Algorithm Engine

Holds every run setting in a single validated dataclass and provides the
keyword-per-line configuration file reader. Configuration file problems
are advisory: an unknown keyword or malformed value is logged as a warning
and the setting keeps its previous value.
"""

import os
from dataclasses import dataclass, asdict, fields
from typing import Any, Dict, List, Optional

from ga_constants import (
    GAConstants, Datatypes, InitPoolSources, ReportTypes, datatype_label
)
from ga_exceptions import ConfigurationError
from ga_logging import get_logger


@dataclass
class GAConfig:
    """
    Configuration container for one GA run.

    Defaults reproduce the classic setup: a generational GA over integer
    permutations of length 10 with a pool of 100, roulette selection,
    order1 crossover, no mutation and append replacement, running until
    the pool converges.
    """

    # Basic parameters
    rand_seed: int = GAConstants.DEFAULT_RAND_SEED
    datatype: str = Datatypes.INT_PERM
    initpool: str = InitPoolSources.RANDOM
    ip_data: str = ""                     # Initial pool file for from_file
    chrom_len: int = GAConstants.DEFAULT_CHROM_LEN
    pool_size: int = GAConstants.DEFAULT_POOL_SIZE
    max_iter: int = GAConstants.DEFAULT_MAX_ITER
    use_convergence: bool = True
    minimize: bool = True
    elitist: bool = True
    scale_factor: float = 0.0
    user_data: str = ""
    function_index: int = GAConstants.DEFAULT_FUNCTION_INDEX

    # Operator parameters
    bias: float = GAConstants.DEFAULT_BIAS
    gap: float = GAConstants.DEFAULT_GAP
    x_rate: float = GAConstants.DEFAULT_X_RATE
    mu_rate: float = GAConstants.DEFAULT_MU_RATE
    pert_range: float = GAConstants.DEFAULT_PERT_RANGE

    # Operator names
    selection: str = GAConstants.DEFAULT_SELECTION
    crossover: str = GAConstants.DEFAULT_CROSSOVER
    mutation: str = GAConstants.DEFAULT_MUTATION
    replacement: str = GAConstants.DEFAULT_REPLACEMENT
    ga: str = GAConstants.DEFAULT_SCHEDULER

    # Reports
    rp_type: str = ReportTypes.SHORT
    rp_interval: int = 1
    rp_file: str = ""
    rp_file_mode: str = "a"
    output_dir: str = "ga_results"
    export_history: bool = False

    # Evaluation
    eval_workers: int = 1

    def __post_init__(self):
        """Validate parameters after initialization."""
        self._validate()

    def validation_errors(self) -> List[str]:
        """Collect every configuration problem without raising."""
        errors = []

        if self.datatype not in Datatypes.ALL:
            errors.append(f"Invalid datatype ({self.datatype}), expected one of: {list(Datatypes.ALL)}")

        if self.initpool not in InitPoolSources.ALL:
            errors.append(f"Invalid initpool ({self.initpool}), expected one of: {list(InitPoolSources.ALL)}")
        elif self.initpool == InitPoolSources.FROM_FILE and not self.ip_data:
            errors.append("No file specified for initpool from_file")

        if self.chrom_len <= 0:
            errors.append(f"Chromosome length ({self.chrom_len}) must be positive")
        if self.pool_size <= 0:
            errors.append(f"Pool size ({self.pool_size}) must be positive")

        # Rate validation
        if not 0.0 <= self.x_rate <= 1.0:
            errors.append(f"Crossover rate ({self.x_rate}) must be between 0.0 and 1.0")
        if self.mu_rate < 0.0:
            errors.append(f"Mutation rate ({self.mu_rate}) must not be negative")
        if not 0.0 <= self.gap <= 1.0:
            errors.append(f"Generation gap ({self.gap}) must be between 0.0 and 1.0")

        for name in ("selection", "crossover", "replacement", "ga"):
            if not getattr(self, name):
                errors.append(f"No {name} function specified")
        if self.mu_rate > 0.0 and not self.mutation:
            errors.append("No mutation function specified")

        # Reports
        if self.rp_type not in ReportTypes.ALL:
            errors.append(f"Invalid report type ({self.rp_type}), expected one of: {list(ReportTypes.ALL)}")
        if self.rp_interval <= 0:
            errors.append(f"Report interval ({self.rp_interval}) must be positive")

        if self.eval_workers < 1:
            errors.append(f"Evaluation workers ({self.eval_workers}) must be positive")

        return errors

    def _validate(self):
        """Raise ConfigurationError listing every problem found."""
        errors = self.validation_errors()
        if errors:
            raise ConfigurationError(
                "Configuration validation failed:\n" + "\n".join(f"  • {error}" for error in errors),
                errors=errors
            )

    def verify(self):
        """Re-validate after in-place edits (config file, CLI overrides)."""
        self._validate()

    @classmethod
    def from_args(cls, args) -> 'GAConfig':
        """
        Create configuration from parsed CLI arguments.

        Arguments left as None keep the dataclass default.

        Args:
            args: argparse.Namespace from CLI parsing

        Returns:
            Validated GAConfig instance
        """
        names = {f.name for f in fields(cls)}
        config_params = {
            name: value for name, value in vars(args).items()
            if name in names and value is not None
        }
        return cls(**config_params)

    def summary(self, operator_names: Optional[Dict[str, str]] = None) -> str:
        """
        Generate the human-readable configuration report.

        Args:
            operator_names: Resolved operator names per family, overriding
                the names stored in the config
        """
        names = {
            'ga': self.ga,
            'selection': self.selection,
            'crossover': self.crossover,
            'mutation': self.mutation,
            'replacement': self.replacement,
        }
        if operator_names:
            names.update(operator_names)

        lines = ["GA Configuration Information:", "-----------------------------", "Basic Info"]
        if self.user_data:
            lines.append(f"   User Data         : {self.user_data}")
        lines.append(f"   Function Index    : {self.function_index}")
        lines.append(f"   Random Seed       : {self.rand_seed}")
        lines.append(f"   Data Type         : {datatype_label(self.datatype)}")
        lines.append(f"   Init Pool Entered : {InitPoolSources.LABELS.get(self.initpool, 'Unspecified')}")
        if self.initpool == InitPoolSources.FROM_FILE:
            lines.append(f"   Initial Pool File : {self.ip_data or 'None'}")
        lines.append(f"   Chromosome Length : {self.chrom_len}")
        lines.append(f"   Pool Size         : {self.pool_size}")
        if self.max_iter < 0:
            lines.append("   Number of Trials  : Run until convergence")
        else:
            stop = "or until convergence" if self.use_convergence else "ignore convergence"
            lines.append(f"   Number of Trials  : {self.max_iter} iterations, {stop}")
        lines.append(f"   Minimize          : {'Yes' if self.minimize else 'No'}")
        lines.append(f"   Elitism           : {'Yes' if self.elitist else 'No'}")
        lines.append(f"   Scale Factor      : {self.scale_factor:g}")

        lines.append("")
        lines.append("Functions")
        lines.append(f"   GA          : {names['ga']} (Gap = {self.gap:g})")
        selection = f"   Selection   : {names['selection']}"
        if names['selection'] == "rank_biased":
            selection += f" (Bias = {self.bias:g})"
        lines.append(selection)
        lines.append(f"   Crossover   : {names['crossover']} (Rate = {self.x_rate:g})")
        if self.mu_rate > 0.0:
            lines.append(f"   Mutation    : {names['mutation']} (Rate = {self.mu_rate:g})")
        lines.append(f"   Replacement : {names['replacement']}")

        if self.rp_type != ReportTypes.NONE:
            lines.append("")
            lines.append("Reports")
            lines.append(f"   Type     : {self.rp_type.capitalize()}")
            lines.append(f"   Interval : {self.rp_interval}")
            if self.rp_file:
                lines.append(f"   File     : {self.rp_file}")

        lines.append("-----------------------------")
        return "\n".join(lines)

    def __str__(self) -> str:
        return (f"GAConfig(ga={self.ga}, pool={self.pool_size}, "
                f"len={self.chrom_len}, max_iter={self.max_iter})")

    def to_dict(self) -> dict:
        """Convert config to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, config_dict: dict) -> 'GAConfig':
        """Create config from dictionary."""
        return cls(**config_dict)

    def update(self, **kwargs) -> 'GAConfig':
        """Create a new config with updated values."""
        current_config = self.to_dict()
        current_config.update(kwargs)
        return self.from_dict(current_config)


def tokenize_config_line(line: str) -> List[str]:
    """Split a config line into whitespace separated tokens, dropping '#' comments."""
    tokens = []
    for token in line.split():
        if token.startswith('#'):
            break
        tokens.append(token)
    return tokens


class ConfigFileReader:
    """
    Keyword-per-line configuration file reader.

    Each line holds a keyword followed by its arguments. Blank lines and
    text after '#' are ignored. Lines the reader cannot apply are logged as
    warnings and leave the configuration unchanged.
    """

    BOOLEAN_VALUES = {'true': True, 'false': False}

    def __init__(self, config: GAConfig = None):
        self.config = config if config is not None else GAConfig()
        self.logger = get_logger("Config")
        self.warnings: List[str] = []
        self._line_number = 0

        self._handlers = {
            'bias': self._read_bias,
            'chrom_len': self._read_chrom_len,
            'crossover': self._operator_setter('crossover'),
            'datatype': self._read_datatype,
            'elitism': self._read_elitism,
            'function_index': self._read_function_index,
            'gap': self._read_gap,
            'ga': self._read_ga,
            'initpool': self._read_initpool,
            'mutation': self._operator_setter('mutation'),
            'mu_rate': self._read_mu_rate,
            'objective': self._read_objective,
            'pert_range': self._read_pert_range,
            'pool_size': self._read_pool_size,
            'replacement': self._operator_setter('replacement'),
            'rp_interval': self._read_rp_interval,
            'rp_type': self._read_rp_type,
            'rp_file': self._read_rp_file,
            'rand_seed': self._read_rand_seed,
            'selection': self._operator_setter('selection'),
            'stop_after': self._read_stop_after,
            'user_data': self._read_user_data,
            'x_rate': self._read_x_rate,
        }

    def read(self, path: str) -> GAConfig:
        """
        Apply every line of a configuration file.

        Args:
            path: Configuration file path

        Returns:
            The updated configuration

        Raises:
            FileNotFoundError: If the configuration file doesn't exist
        """
        if not os.path.exists(path):
            raise FileNotFoundError(f"Config file '{path}' not found.")

        with open(path, 'r') as config_file:
            for line in config_file:
                self.read_line(line)

        return self.config

    def read_line(self, line: str):
        """Apply a single configuration line."""
        self._line_number += 1
        tokens = tokenize_config_line(line)
        if not tokens:
            return

        handler = self._handlers.get(tokens[0])
        if handler is None:
            self._warn(f"Unknown config command '{tokens[0]}'")
            return
        handler(tokens)

    def _warn(self, message: str):
        self.warnings.append(message)
        self.logger.log_config_warning(self._line_number, message)

    def _parse(self, tokens: List[str], convert, keyword: str):
        """Convert the first argument or warn; returns None on failure."""
        if len(tokens) < 2:
            self._warn(f"Invalid {keyword} response")
            return None
        try:
            return convert(tokens[1])
        except ValueError:
            self._warn(f"Invalid {keyword} response '{tokens[1]}'")
            return None

    def _set_number(self, tokens: List[str], name: str, convert):
        value = self._parse(tokens, convert, name)
        if value is not None:
            setattr(self.config, name, value)

    def _operator_setter(self, name: str):
        def setter(tokens: List[str]):
            if len(tokens) >= 2:
                setattr(self.config, name, tokens[1])
            else:
                self._warn(f"Invalid {name} response")
        return setter

    def _read_bias(self, tokens):
        self._set_number(tokens, 'bias', float)

    def _read_chrom_len(self, tokens):
        self._set_number(tokens, 'chrom_len', int)

    def _read_function_index(self, tokens):
        self._set_number(tokens, 'function_index', int)

    def _read_gap(self, tokens):
        self._set_number(tokens, 'gap', float)

    def _read_mu_rate(self, tokens):
        self._set_number(tokens, 'mu_rate', float)

    def _read_x_rate(self, tokens):
        self._set_number(tokens, 'x_rate', float)

    def _read_pert_range(self, tokens):
        self._set_number(tokens, 'pert_range', float)

    def _read_pool_size(self, tokens):
        self._set_number(tokens, 'pool_size', int)

    def _read_rp_interval(self, tokens):
        self._set_number(tokens, 'rp_interval', int)

    def _read_datatype(self, tokens):
        if len(tokens) >= 2 and tokens[1] in Datatypes.ALL:
            self.config.datatype = tokens[1]
        else:
            self._warn("Invalid datatype response")

    def _read_elitism(self, tokens):
        if len(tokens) >= 2 and tokens[1] in self.BOOLEAN_VALUES:
            self.config.elitist = self.BOOLEAN_VALUES[tokens[1]]
        else:
            self._warn("Invalid elitism response")

    def _read_objective(self, tokens):
        if len(tokens) >= 2 and tokens[1] in ('minimize', 'maximize'):
            self.config.minimize = tokens[1] == 'minimize'
        else:
            self._warn("Invalid objective response")

    def _read_ga(self, tokens):
        if len(tokens) < 2:
            self._warn("Invalid ga response")
            return

        self.config.ga = tokens[1]
        if tokens[1] == "generational":
            self.config.selection = GAConstants.DEFAULT_SELECTION
            self.config.replacement = GAConstants.DEFAULT_REPLACEMENT
            self.config.rp_interval = 1
        elif tokens[1] == "steady_state":
            self.config.selection = GAConstants.STEADY_STATE_SELECTION
            self.config.replacement = GAConstants.STEADY_STATE_REPLACEMENT
            self.config.rp_interval = GAConstants.STEADY_STATE_RP_INTERVAL

    def _read_initpool(self, tokens):
        if len(tokens) < 2 or tokens[1] not in (InitPoolSources.RANDOM, InitPoolSources.RANDOM01,
                                                InitPoolSources.FROM_FILE, InitPoolSources.INTERACTIVE):
            self._warn("Invalid initpool response")
            return

        self.config.initpool = tokens[1]
        if tokens[1] == InitPoolSources.FROM_FILE and len(tokens) >= 3:
            self.config.ip_data = tokens[2]

    def _read_rp_type(self, tokens):
        if len(tokens) >= 2 and tokens[1] in ReportTypes.ALL:
            self.config.rp_type = tokens[1]
        else:
            self._warn("Invalid rp_type response")

    def _read_rp_file(self, tokens):
        if len(tokens) < 2:
            self._warn("Invalid rp_file response")
            return
        self.config.rp_file = tokens[1]
        if len(tokens) >= 3:
            self.config.rp_file_mode = tokens[2]

    def _read_rand_seed(self, tokens):
        if len(tokens) >= 2 and tokens[1] == "my_pid":
            self.config.rand_seed = os.getpid()
        else:
            self._set_number(tokens, 'rand_seed', int)

    def _read_stop_after(self, tokens):
        if len(tokens) == 2 and tokens[1] == "convergence":
            self.config.use_convergence = True
            self.config.max_iter = -1
            return

        max_iter = self._parse(tokens, int, 'stop_after')
        if max_iter is None:
            return
        if max_iter < 1:
            self._warn(f"Invalid number for stop_after ({max_iter})")
            return

        self.config.max_iter = max_iter
        self.config.use_convergence = not (len(tokens) > 2 and tokens[2] == "ignore_convergence")

    def _read_user_data(self, tokens):
        if len(tokens) >= 2:
            self.config.user_data = tokens[1]
        else:
            self._warn("Invalid user_data response")


def load_config_file(path: str, config: GAConfig = None) -> GAConfig:
    """
    Read a configuration file on top of an existing (or default) config.

    Args:
        path: Configuration file path
        config: Configuration to update in place (defaults are used if None)

    Returns:
        The updated configuration
    """
    return ConfigFileReader(config).read(path)
