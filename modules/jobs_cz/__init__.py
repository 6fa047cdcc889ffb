# modules/jobs_cz/__init__.py
from . import lib  # so: from modules.jobs_cz import lib
from .main import run  # so: from modules.jobs_cz import run

__all__ = ["lib", "run"]
