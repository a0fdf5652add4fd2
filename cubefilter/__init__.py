"""Crossfilter-style adapter for remote OLAP cubes"""

__version__ = "1.0"

from .common import *
from .config import *
from .errors import *
from .logging import *
from .metadata import *
from .query import *
