from enum import Enum


class ProductSort(str, Enum):
    LATEST = "latest"  # created_at descending
    NAME = "name"      # name ascending
