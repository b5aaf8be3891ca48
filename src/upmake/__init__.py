"""Keep lists of source files in build files in sync with a master list."""

from upmake.fileslist import FilesListError, load_files_list, read_files_list
from upmake.rewriters import update_bakefile_0, update_makefile
from upmake.update import UpdateOptions, UpdateResult, upmake

__version__ = "0.4.0"

__all__ = [
    "FilesListError",
    "UpdateOptions",
    "UpdateResult",
    "__version__",
    "load_files_list",
    "read_files_list",
    "update_bakefile_0",
    "update_makefile",
    "upmake",
]
