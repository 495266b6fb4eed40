"""
Helpers shared by the test modules.
"""

import io
import tarfile


def make_tar_xz(members: dict, top_dir: str = "") -> bytes:
    """
    Build an in-memory .tar.xz archive.

    Args:
        members: Archive member name -> file content
        top_dir: Optional directory every member is placed under
    """
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:xz") as tar:
        for name, content in members.items():
            data = content.encode() if isinstance(content, str) else content
            info = tarfile.TarInfo(f"{top_dir}/{name}" if top_dir else name)
            info.size = len(data)
            info.mode = 0o755
            tar.addfile(info, io.BytesIO(data))
    return buffer.getvalue()
