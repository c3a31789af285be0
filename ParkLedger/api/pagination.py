import os

from ParkLedger.api.errors import ValidationError

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = min(int(os.environ.get("PARKLEDGER_PAGE_SIZE", "20")), MAX_PAGE_SIZE)


def check_page(page: int, page_size: int):
    if page < 1:
        raise ValidationError("page starts at 1")
    if page_size < 1 or page_size > MAX_PAGE_SIZE:
        raise ValidationError(f"page_size must be between 1 and {MAX_PAGE_SIZE}")
    return (page - 1) * page_size


def page_response(items, page: int, page_size: int, total: int):
    return {
        "items": [item.to_dict() for item in items],
        "page": page,
        "page_size": page_size,
        "total": total,
    }
