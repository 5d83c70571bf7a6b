"""
YAML configuration loader for scorecard runs.

Loads scorecard configurations from YAML files, allowing easy sharing
and modification of strategy grids without code changes.
"""
import yaml
from pathlib import Path
from typing import Union

from .config import ScorecardConfig, DataConfig
from ..shared.defaults import (
    BACK_DAYS, MIN_TRADES, BEST_N, SUCCESS_WEIGHT, RETURN_WEIGHT,
    RECOMMENDATIONS_PER_STRATEGY, MIN_BARS, EXCLUDED_PREFIXES,
)


def config_from_dict(config_dict: dict, default_name: str = "scorecard") -> ScorecardConfig:
    """
    Build a ScorecardConfig from the nested YAML structure.

    Sections: run, ranking, report, data, selectors, signals, targets.
    Missing values fall back to shared.defaults.
    """
    run = config_dict.get('run') or {}
    ranking = config_dict.get('ranking') or {}
    report = config_dict.get('report') or {}
    data = config_dict.get('data') or {}

    symbols = data.get('symbols')
    if symbols is not None and not isinstance(symbols, list):
        symbols = [symbols]

    excluded = data.get('excluded_prefixes', list(EXCLUDED_PREFIXES))
    if isinstance(excluded, (str, int)):
        excluded = [excluded]

    return ScorecardConfig(
        name=config_dict.get('name', default_name),
        description=config_dict.get('description', ''),
        selectors=config_dict.get('selectors') or [],
        signals=config_dict.get('signals') or [],
        targets=config_dict.get('targets') or [],

        back_days=run.get('back_days', BACK_DAYS),
        max_workers=run.get('max_workers'),
        executor=run.get('executor', 'process'),

        min_trades=ranking.get('min_trades', MIN_TRADES),
        best_n=ranking.get('best_n', BEST_N),
        success_weight=ranking.get('success_weight', SUCCESS_WEIGHT),
        return_weight=ranking.get('return_weight', RETURN_WEIGHT),

        recommendations_per_strategy=report.get('recommendations_per_strategy', RECOMMENDATIONS_PER_STRATEGY),

        data=DataConfig(
            data_dir=data.get('data_dir'),
            symbols=[str(s) for s in symbols] if symbols is not None else None,
            start_date=data.get('start_date'),
            end_date=data.get('end_date'),
            min_bars=data.get('min_bars', MIN_BARS),
            excluded_prefixes=list(excluded) if excluded else [],
            min_avg_volume=data.get('min_avg_volume'),
        ),
    )


def load_scorecard_config(yaml_path: Union[str, Path]) -> ScorecardConfig:
    """
    Load scorecard configuration from YAML file.

    Args:
        yaml_path: Path to YAML configuration file

    Returns:
        ScorecardConfig object

    Raises:
        FileNotFoundError: If YAML file doesn't exist
        ValueError: If YAML is empty or not a mapping
        ConfigurationError: If a parameter is invalid (subclass of ValueError)
    """
    yaml_path = Path(yaml_path)

    if not yaml_path.exists():
        raise FileNotFoundError(f"Config file not found: {yaml_path}")

    with open(yaml_path, 'r') as f:
        config_dict = yaml.safe_load(f)

    if not config_dict:
        raise ValueError(f"Empty config file: {yaml_path}")
    if not isinstance(config_dict, dict):
        raise ValueError(f"Config file must contain a mapping: {yaml_path}")

    return config_from_dict(config_dict, default_name=yaml_path.stem)
