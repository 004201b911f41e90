"""Interval stores: where an asset's bookings are fetched from."""

from pathlib import Path
from typing import List, Union

import yaml

from .client import ApiClient
from .errors import FetchError
from .interval import Interval
from .loader import load_asset


class YamlIntervalStore:
    """Intervals read from a local asset YAML file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def fetch(self) -> List[Interval]:
        try:
            asset = load_asset(self.path)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise FetchError(f"Could not read {self.path}: {e}") from e
        return asset.availability_intervals()


class ApiIntervalStore:
    """Intervals read from the rental API's availability endpoint."""

    def __init__(self, client: ApiClient, tool_id: str):
        self.client = client
        self.tool_id = tool_id

    def fetch(self) -> List[Interval]:
        return [i for i in self.client.get_availability(self.tool_id) if not i.is_cancelled]
