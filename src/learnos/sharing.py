"""Share links: a study guide and its material packed into a URL fragment."""
import base64
import binascii
import json

from learnos.errors import ShareTokenError
from learnos.models import SharedData, StudyGuide, is_shared_data

SHARE_PREFIX = "#/view/"


def encode_token(guide: StudyGuide, material: str) -> str:
    """Base64 of the JSON form of ``{guide, material}``. Quizzes are never included."""
    payload = json.dumps(SharedData(guide=guide, material=material).to_dict(), ensure_ascii=False)
    return base64.b64encode(payload.encode("utf-8")).decode("ascii")


def build_share_url(guide: StudyGuide, material: str, origin: str, path: str = "/") -> str:
    return f"{origin}{path}{SHARE_PREFIX}{encode_token(guide, material)}"


def decode_token(token: str) -> SharedData:
    try:
        raw = base64.b64decode(token, validate=True)
        data = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise ShareTokenError(f"Malformed share token: {e}") from e
    if not is_shared_data(data):
        raise ShareTokenError("Invalid data structure in share token")
    return SharedData.from_dict(data)


def split_share_fragment(location: str) -> tuple[str | None, str]:
    """Split a location into its share token and the location without a fragment.

    Returns ``(None, location)`` unchanged when there is no share fragment.
    """
    base, sep, fragment = location.partition("#")
    if not sep or not ("#" + fragment).startswith(SHARE_PREFIX):
        return None, location
    return fragment[len(SHARE_PREFIX) - 1:], base
