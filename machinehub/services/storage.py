import os

STORED_DIR = os.getenv("MACHINEHUB_STORED_DIR", "stored")


def ensure_storage() -> None:
    os.makedirs(STORED_DIR, exist_ok=True)


def save_stored(content: bytes, name: str, folder: str) -> str:
    ensure_storage()
    directory = os.path.join(STORED_DIR, folder)
    os.makedirs(directory, exist_ok=True)
    path = os.path.join(directory, name)
    # Same name overwrites the previous blob.
    with open(path, "wb") as f:
        f.write(content)
    return path.replace("\\", "/")


def list_stored(folder: str) -> list[str]:
    directory = os.path.join(STORED_DIR, folder)
    if not os.path.isdir(directory):
        return []
    return sorted(
        entry for entry in os.listdir(directory) if os.path.isfile(os.path.join(directory, entry))
    )
