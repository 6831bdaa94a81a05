"""
app.services.presence
~~~~~~~~~~~~~~~~~~~~~

在线状态登记表 —— 连接 ID → 最近一次 ``user_joined`` 宣告的用户资料快照。

资料快照在宣告时写入，之后不再重新校验或刷新。
条目数即首页统计中的在线人数。
"""
from __future__ import annotations

from typing import Any


class PresenceRegistry:
    """在线状态登记表。

    每个存活连接最多一个条目；进程重启后为空。
    """

    def __init__(self) -> None:
        self._entries: dict[str, dict[str, Any]] = {}

    def announce(self, connection_id: str, profile: dict[str, Any]) -> None:
        """登记（或覆盖）连接对应的用户资料。"""
        self._entries[connection_id] = profile

    def remove(self, connection_id: str) -> dict[str, Any] | None:
        """移除连接的条目，返回被移除的资料快照；不存在时返回 ``None``。"""
        return self._entries.pop(connection_id, None)

    def snapshot(self) -> list[dict[str, Any]]:
        """当前所有在线用户资料（顺序无意义）。"""
        return list(self._entries.values())

    @property
    def online_count(self) -> int:
        """当前在线人数。"""
        return len(self._entries)

    def __contains__(self, connection_id: object) -> bool:
        return connection_id in self._entries
