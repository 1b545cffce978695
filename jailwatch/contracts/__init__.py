"""External response shapes and the serializers that produce them."""

from jailwatch.contracts.serializers import (
    coarsen_server_status,
    resolve_ban_count,
    serialize_backup_response,
    serialize_banned_ip,
    serialize_history_response,
    serialize_jail,
    serialize_jail_response,
    serialize_jails_response,
    serialize_nginx_response,
    serialize_overview_response,
    serialize_system_response,
)

__all__ = [
    "coarsen_server_status",
    "resolve_ban_count",
    "serialize_backup_response",
    "serialize_banned_ip",
    "serialize_history_response",
    "serialize_jail",
    "serialize_jail_response",
    "serialize_jails_response",
    "serialize_nginx_response",
    "serialize_overview_response",
    "serialize_system_response",
]
