"""Read study material from files in various formats."""
import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def read_file_content(file_path: str) -> str:
    path = Path(file_path)
    suffix = path.suffix.lower()

    if suffix in (".txt", ".md"):
        return path.read_text()
    elif suffix == ".json":
        data = json.loads(path.read_text())
        return json.dumps(data, indent=2) if isinstance(data, (dict, list)) else str(data)
    elif suffix in (".yaml", ".yml"):
        import yaml
        data = yaml.safe_load(path.read_text())
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True) if isinstance(data, (dict, list)) else str(data)
    elif suffix == ".pdf":
        from PyPDF2 import PdfReader
        reader = PdfReader(file_path)
        return "\n".join(page.extract_text() or "" for page in reader.pages)
    elif suffix == ".docx":
        from docx import Document
        doc = Document(file_path)
        return "\n".join(p.text for p in doc.paragraphs)
    elif suffix in (".html", ".htm"):
        from bs4 import BeautifulSoup
        html = path.read_text()
        return BeautifulSoup(html, "html.parser").get_text()
    else:
        # Try reading as plain text
        return path.read_text()


def is_material_file(value: str) -> bool:
    """True when ``value`` names an existing file."""
    candidate = value.strip()
    if not candidate or len(candidate) >= 4096:
        return False
    try:
        return Path(candidate).expanduser().is_file()
    except (OSError, ValueError):
        return False


def load_material(value: str) -> str:
    """Return the contents of ``value`` if it names a file, else ``value`` itself."""
    if is_material_file(value):
        path = Path(value.strip()).expanduser()
        logger.info("Reading study material from %s", path)
        return read_file_content(str(path))
    return value
