"""pyfs_utils - filesystem toolkit built around a filtered tree walker."""

import logging

from pyfs_utils._errors import (
    AlreadyExistsError,
    CopyError,
    # Exceptions
    FsUtilsError,
    HashError,
    IOFailureError,
    LockError,
    NotADirError,
    NotAFileError,
    NotFoundError,
    PermissionDeniedError,
)
from pyfs_utils.compare import content_equals, content_equals_ignore_eol, directory_contains
from pyfs_utils.copy import (
    # Copy/Move
    CopyProgress,
    copy_directory,
    copy_directory_to_directory,
    copy_file,
    copy_file_to_directory,
    copy_files,
    copy_stream_to_file,
    copy_to_directory,
    move_directory,
    move_directory_to_directory,
    move_file,
    move_file_to_directory,
    move_files,
    move_to_directory,
)
from pyfs_utils.counters import (
    BigIntCounter,
    # Counters
    LongCounter,
    NoopCounter,
    PathCounters,
    big_int_path_counters,
    long_path_counters,
    noop_path_counters,
)
from pyfs_utils.delete import (
    # Delete
    DeleteOption,
    clean_directory,
    delete,
    delete_directory,
    delete_quietly,
    force_delete,
)
from pyfs_utils.filters import (
    # Filters
    PathFilter,
    age_filter,
    and_,
    extension_filter,
    false_filter,
    glob_filter,
    hidden_filter,
    is_directory,
    is_regular_file,
    name_filter,
    newer_filter,
    not_,
    older_filter,
    or_,
    path_equals_filter,
    size_filter,
    suffix_filter,
    true_filter,
)
from pyfs_utils.files import (
    create_parent_directories,
    current,
    force_mkdir,
    force_mkdir_parent,
    get_file,
    is_empty_directory,
    is_file_newer,
    is_file_older,
    last_modified,
    line_iterator,
    open_output_stream,
    read_file_to_bytes,
    # Read/Write
    read_file_to_string,
    read_lines,
    temp_directory,
    touch,
    user_directory,
    wait_for,
    write_bytes_to_file,
    write_lines,
    write_string_to_file,
)
from pyfs_utils.hash import (
    # Hash
    HashResult,
    checksum_crc32,
    hash_file,
    hash_files,
)
from pyfs_utils.lock import LockableFileWriter
from pyfs_utils.sizes import (
    ONE_EB,
    ONE_GB,
    ONE_KB,
    ONE_MB,
    ONE_PB,
    ONE_TB,
    ONE_YB,
    ONE_ZB,
    # Sizes
    byte_count_to_display_size,
    size_of,
    size_of_directory,
)
from pyfs_utils.visitor import (
    AccumulatorVisitor,
    CountingVisitor,
    PathVisitor,
    VisitResult,
    WalkResult,
)
from pyfs_utils.walk import (
    # Walk
    WalkEntry,
    WalkIter,
    accumulate,
    count,
    iterate_files,
    list_files,
    list_files_and_dirs,
    stream_files,
    walk,
    walk_collect,
    walk_tree,
)

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Exceptions
    "FsUtilsError",
    "NotFoundError",
    "NotADirError",
    "NotAFileError",
    "PermissionDeniedError",
    "AlreadyExistsError",
    "IOFailureError",
    "CopyError",
    "HashError",
    "LockError",
    # Walk
    "WalkEntry",
    "WalkIter",
    "WalkResult",
    "PathVisitor",
    "CountingVisitor",
    "AccumulatorVisitor",
    "VisitResult",
    "walk",
    "walk_collect",
    "walk_tree",
    "accumulate",
    "count",
    "list_files",
    "list_files_and_dirs",
    "iterate_files",
    "stream_files",
    # Filters
    "PathFilter",
    "and_",
    "or_",
    "not_",
    "true_filter",
    "false_filter",
    "is_regular_file",
    "is_directory",
    "name_filter",
    "suffix_filter",
    "extension_filter",
    "glob_filter",
    "hidden_filter",
    "size_filter",
    "newer_filter",
    "older_filter",
    "age_filter",
    "path_equals_filter",
    # Counters
    "LongCounter",
    "BigIntCounter",
    "NoopCounter",
    "PathCounters",
    "long_path_counters",
    "big_int_path_counters",
    "noop_path_counters",
    # Hash
    "HashResult",
    "hash_file",
    "hash_files",
    "checksum_crc32",
    # Compare
    "content_equals",
    "content_equals_ignore_eol",
    "directory_contains",
    # Copy/Move
    "CopyProgress",
    "copy_file",
    "copy_file_to_directory",
    "copy_directory",
    "copy_directory_to_directory",
    "copy_to_directory",
    "copy_stream_to_file",
    "copy_files",
    "move_file",
    "move_directory",
    "move_file_to_directory",
    "move_directory_to_directory",
    "move_to_directory",
    "move_files",
    # Delete
    "DeleteOption",
    "delete",
    "force_delete",
    "delete_directory",
    "clean_directory",
    "delete_quietly",
    # Sizes
    "ONE_KB",
    "ONE_MB",
    "ONE_GB",
    "ONE_TB",
    "ONE_PB",
    "ONE_EB",
    "ONE_ZB",
    "ONE_YB",
    "byte_count_to_display_size",
    "size_of",
    "size_of_directory",
    # Files
    "force_mkdir",
    "force_mkdir_parent",
    "create_parent_directories",
    "is_empty_directory",
    "get_file",
    "temp_directory",
    "user_directory",
    "current",
    "touch",
    "last_modified",
    "is_file_newer",
    "is_file_older",
    "wait_for",
    # Read/Write
    "read_file_to_string",
    "read_file_to_bytes",
    "read_lines",
    "line_iterator",
    "open_output_stream",
    "write_string_to_file",
    "write_bytes_to_file",
    "write_lines",
    # Lock
    "LockableFileWriter",
]
