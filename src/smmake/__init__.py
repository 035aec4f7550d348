from .engine import Engine
from .errors import (
    CircularDependency,
    CommandFailed,
    DependencyFailed,
    DescriptionFileError,
    ParseError,
    SmmakeError,
    TargetNotFound,
)
from .model import Command, Graph, Target
from .parser import parse_file, parse_text
from .patterns import PatternMatcher
from .runner import CommandRunner

__version__ = "0.1.0"

__all__ = [
    "Engine",
    "CommandRunner",
    "PatternMatcher",
    "parse_file",
    "parse_text",
    "Command",
    "Graph",
    "Target",
    "SmmakeError",
    "DescriptionFileError",
    "ParseError",
    "TargetNotFound",
    "CircularDependency",
    "CommandFailed",
    "DependencyFailed",
]
