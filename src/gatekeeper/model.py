from datetime import date
from typing import Any, Dict, Optional
import io

import yaml

from gatekeeper.errors import ConfigParseError

# structure of a single group belongs to the policy evaluator
ConfigGroup = Any

Config = Dict[str, ConfigGroup]


def _group_name(key: Any) -> str:
    if isinstance(key, bool):
        return "true" if key else "false"
    if isinstance(key, (str, int, float, date)):
        return str(key)
    raise ValueError(f"Invalid group name {key!r}")


def parse_config(raw: str, source_url: Optional[str] = None) -> Config:
    """Parse the approval-group config document.

    Only the top level is checked: it must be a mapping. Scalar keys such as
    ``123:`` are turned into string group names; values are left untouched.
    An empty document yields an empty config.
    """
    try:
        data = yaml.safe_load(io.StringIO(raw))
    except yaml.YAMLError as e:
        raise ConfigParseError(str(e), raw_config=raw, source_url=source_url) from e

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigParseError(
            f"Config must map group names to groups, got {type(data).__name__}",
            raw_config=raw,
            source_url=source_url,
        )

    try:
        return {_group_name(key): group for key, group in data.items()}
    except ValueError as e:
        raise ConfigParseError(str(e), raw_config=raw, source_url=source_url) from e
