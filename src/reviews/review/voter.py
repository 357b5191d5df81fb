"""Voter identity for helpfulness votes.

Authenticated voters are identified by user id. Anonymous voters are
identified by their client IP, normalized so that IPv4-mapped IPv6 and
IPv6 loopback addresses collapse onto their IPv4 spelling.
"""

from protean.exceptions import ValidationError

_IPV4_MAPPED_PREFIX = "::ffff:"


def normalize_ip(raw: str | None) -> str | None:
    if not raw:
        return None
    ip = raw.strip()
    if ip.lower().startswith(_IPV4_MAPPED_PREFIX):
        ip = ip[len(_IPV4_MAPPED_PREFIX) :]
    if ip == "::1":
        return "127.0.0.1"
    return ip or None


def resolve_voter(user_id: str | None = None, client_ip: str | None = None) -> tuple[str | None, str | None]:
    """Return `(user_id, voter_ip)` with exactly one of them set.

    The IP is only consulted when there is no user id.
    """
    if user_id:
        return str(user_id), None
    voter_ip = normalize_ip(client_ip)
    if voter_ip is None:
        raise ValidationError({"voter": ["A vote needs an authenticated user or a client address"]})
    return None, voter_ip


def vote_key(review_id, user_id: str | None = None, voter_ip: str | None = None) -> str:
    user_id, voter_ip = resolve_voter(user_id, voter_ip)
    if user_id:
        return f"{review_id}:user:{user_id}"
    return f"{review_id}:ip:{voter_ip}"
