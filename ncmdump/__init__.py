from .main import *
from .api_bytes import build_container, decode, dump_bytes, mime_for_format, output_name, read_metadata
from .api_files import dump_file, dump_files
from .version import __version__
