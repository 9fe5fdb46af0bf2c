"""
Sorted, paginated projections over the reconciled token set.

Every sort key ends with the token address so that ties break the same way
on every call and page slices line up across page sizes.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from monscreener.models.token import TokenPage, TokenRecord
from monscreener.utils.errors import ValidationError

RECENT_WINDOW = timedelta(hours=24)
MIN_RECENT_TOKENS = 10
MAX_PAGE_SIZE = 200


def validate_paging(page: int, limit: int) -> None:
    """
    Raises:
        ValidationError: If ``page`` < 1 or ``limit`` is outside 1..200
    """
    if page < 1:
        raise ValidationError("Page must be at least 1", details={"page": page})
    if limit < 1 or limit > MAX_PAGE_SIZE:
        raise ValidationError(
            f"Limit must be between 1 and {MAX_PAGE_SIZE}",
            details={"limit": limit}
        )


def paginate(tokens: Sequence[TokenRecord], page: int, limit: int) -> TokenPage:
    """Slice an already ordered sequence into a 1-based page."""
    validate_paging(page, limit)
    start = (page - 1) * limit
    return TokenPage(
        tokens=list(tokens[start:start + limit]),
        page=page,
        limit=limit,
        total=len(tokens)
    )


def _partitioned(
    tokens: Iterable[TokenRecord],
    graduated_key: Callable[[TokenRecord], float]
) -> List[TokenRecord]:
    # Non-graduated by progress, then graduated by the given metric
    def sort_key(token: TokenRecord) -> Tuple[int, float, str]:
        if token.graduated:
            return (1, -graduated_key(token), token.address)
        return (0, -token.bonding_curve_progress, token.address)

    return sorted(tokens, key=sort_key)


def by_creation_time(
    tokens: Iterable[TokenRecord],
    page: int = 1,
    limit: int = 50,
    now: Optional[datetime] = None
) -> TokenPage:
    """
    Newest tokens first.

    When at least 10 tokens were created in the last 24 hours only those are
    paged over, otherwise the whole set is, so the view is never empty for
    lack of recent activity.
    """
    validate_paging(page, limit)
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    ordered = sorted(
        tokens,
        key=lambda t: (-t.created_at.timestamp(), t.address)
    )
    cutoff = now - RECENT_WINDOW
    recent = [t for t in ordered if t.created_at > cutoff]
    return paginate(recent if len(recent) >= MIN_RECENT_TOKENS else ordered, page, limit)


def by_market_cap(tokens: Iterable[TokenRecord], page: int = 1, limit: int = 50) -> TokenPage:
    """Non-graduated tokens by progress, then graduated tokens by market cap."""
    validate_paging(page, limit)
    return paginate(_partitioned(tokens, lambda t: t.market_cap), page, limit)


def by_latest_trade(tokens: Iterable[TokenRecord], page: int = 1, limit: int = 50) -> TokenPage:
    """Non-graduated tokens by progress, then graduated tokens by 24h volume."""
    validate_paging(page, limit)
    return paginate(_partitioned(tokens, lambda t: t.volume_24h), page, limit)
