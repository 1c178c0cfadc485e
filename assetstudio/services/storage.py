import os
import posixpath
import uuid


def _safe_relative(name: str) -> str:
    parts = [part for part in name.replace("\\", "/").split("/") if part not in {"", ".", ".."}]
    if not parts:
        raise ValueError(f"invalid file name: {name!r}")
    return posixpath.join(*parts)


class LocalMediaStore:
    def __init__(self, root_dir: str, url_prefix: str):
        self.root_dir = root_dir
        self.url_prefix = url_prefix.rstrip("/")

    def new_export_id(self) -> str:
        return str(uuid.uuid4())

    def save_export_file(self, export_id: str, name: str, data: bytes) -> tuple[str, str]:
        """Write one exported file under `<root>/exports/<export_id>/<name>`.

        `name` may carry a language folder such as `fr/screenshot-1-ipad-12.9.png`.
        Returns the file path and its public URL.
        """
        relative = posixpath.join("exports", export_id, _safe_relative(name))
        file_path = os.path.join(self.root_dir, *relative.split("/"))
        os.makedirs(os.path.dirname(file_path), exist_ok=True)

        with open(file_path, "wb") as f:
            f.write(data)

        url = f"{self.url_prefix}/{relative}"
        return file_path, url
