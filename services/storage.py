import os

from flask import current_app
from werkzeug.security import safe_join


class PaperStorage:
    """
    Private blob store for uploaded papers.

    Keys are opaque relative paths like ``<uploader_id>/<paper_id>.pdf``.
    Nothing here is reachable as a static URL; files go out only through
    routes that have already checked the caller.
    """

    def __init__(self, root):
        self.root = root

    def _path(self, key):
        path = safe_join(self.root, key)
        if path is None:
            raise ValueError(f"Invalid storage key: {key!r}")
        return path

    def save(self, key, data, overwrite=False):
        path = self._path(key)
        if not overwrite and os.path.exists(path):
            raise FileExistsError(key)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "wb") as fh:
            fh.write(data)
        return key

    def exists(self, key):
        return os.path.exists(self._path(key))

    def path_for(self, key):
        path = self._path(key)
        if not os.path.exists(path):
            raise FileNotFoundError(key)
        return path

    def remove(self, key):
        path = self._path(key)
        if os.path.exists(path):
            os.remove(path)


def get_storage():
    return PaperStorage(current_app.config["UPLOAD_FOLDER"])
