from .directory_file_saver import DirectoryFileSaver
from .download_file_saver import DownloadFileSaver

__all__ = [
    "DirectoryFileSaver",
    "DownloadFileSaver",
]
