"""
app.services.room_membership
~~~~~~~~~~~~~~~~~~~~~~~~~~~~

房间成员表 —— 每个连接恰好属于一个房间，用于限定聊天消息的广播范围。

房间状态只保存在这里，不挂在传输层的连接对象上。
"""
from __future__ import annotations

from collections import defaultdict


class RoomMembership:
    """连接 ID ↔ 房间标签的双向映射。

    Attributes:
        default_room: 新连接默认加入的房间。
    """

    def __init__(self, default_room: str = "general") -> None:
        self.default_room = default_room
        self._room_of: dict[str, str] = {}
        self._members: defaultdict[str, set[str]] = defaultdict(set)

    def join(self, connection_id: str, room: str) -> str | None:
        """把连接切换到 ``room``，返回之前所在的房间（没有则为 ``None``）。

        房间标签不做任何校验，任意字符串均可。
        """
        previous = self._room_of.get(connection_id)
        if previous is not None:
            self._discard(connection_id, previous)
        self._room_of[connection_id] = room
        self._members[room].add(connection_id)
        return previous

    def join_default(self, connection_id: str) -> None:
        """加入默认房间（新连接建立时调用）。"""
        self.join(connection_id, self.default_room)

    def leave(self, connection_id: str) -> str | None:
        """连接断开时彻底移除，返回其最后所在的房间。"""
        room = self._room_of.pop(connection_id, None)
        if room is not None:
            self._discard(connection_id, room)
        return room

    def room_of(self, connection_id: str) -> str | None:
        return self._room_of.get(connection_id)

    def members(self, room: str) -> list[str]:
        """房间内当前的所有连接（调用时刻的快照）。"""
        return list(self._members.get(room, ()))

    def _discard(self, connection_id: str, room: str) -> None:
        members = self._members.get(room)
        if members is None:
            return
        members.discard(connection_id)
        # 空房间不保留
        if not members:
            del self._members[room]
