# local imports
from .base import *
from .arg import ArgumentParser
from .config import Config
