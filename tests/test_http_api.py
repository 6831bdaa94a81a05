"""
tests.test_http_api
~~~~~~~~~~~~~~~~~~~

HTTP 接口测试 —— 使用 FastAPI ``TestClient``，不触发 lifespan，
``app.state`` 中的仓库与服务全部替换为 mock。
"""
from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime, timezone
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from fastapi.staticfiles import StaticFiles
from fastapi.testclient import TestClient
from pymongo.errors import DuplicateKeyError

from app.core.config import settings
from app.core.security import create_access_token, decode_token
from app.main import app
from app.services.chat_relay import ChatRelay


def _user(**overrides: Any) -> dict[str, Any]:
    now = datetime(2024, 5, 1, tzinfo=timezone.utc)
    return {
        "_id": ObjectId(),
        "fullName": "Ada Lovelace",
        "email": "ada@example.com",
        "role": "backend",
        "level": "senior",
        "isAdmin": False,
        "badges": [{"name": "Newcomer", "icon": "fa-seedling", "color": "green", "earnedAt": now}],
        "joinedAt": now,
        "lastActive": now,
        **overrides,
    }


@pytest.fixture()
def repos() -> MagicMock:
    repos = MagicMock()
    repos.users.find_by_email = AsyncMock(return_value=None)
    repos.users.find_by_id = AsyncMock(return_value=None)
    repos.users.create = AsyncMock(side_effect=lambda profile, badges=None: _user(**profile))
    repos.users.touch_last_active = AsyncMock(return_value=None)
    repos.users.award_badge = AsyncMock(return_value=True)
    repos.users.count = AsyncMock(return_value=10)
    repos.users.recent = AsyncMock(return_value=[_user()])
    repos.projects.list_public = AsyncMock(return_value=[])
    repos.projects.create = AsyncMock(side_effect=lambda data: {"_id": ObjectId(), **data})
    repos.projects.count = AsyncMock(return_value=4)
    repos.apis.list_approved = AsyncMock(return_value=[])
    repos.apis.create = AsyncMock(side_effect=lambda data: {"_id": ObjectId(), "isApproved": False, **data})
    repos.apis.increment_usage = AsyncMock(return_value=None)
    repos.apis.count_approved = AsyncMock(return_value=2)
    repos.apis.count_pending = AsyncMock(return_value=3)
    repos.lessons.list_ordered = AsyncMock(return_value=[])
    repos.hackathons.count_active = AsyncMock(return_value=1)
    repos.messages.count = AsyncMock(return_value=42)
    return repos


@pytest.fixture()
def assistant() -> MagicMock:
    assistant = MagicMock()
    assistant.ask = AsyncMock(return_value="Use a for loop.")
    return assistant


@pytest.fixture()
def client(repos: MagicMock, relay: ChatRelay, assistant: MagicMock) -> Iterator[TestClient]:
    app.state.repos = repos
    app.state.chat_relay = relay
    app.state.assistant = assistant
    yield TestClient(app, raise_server_exceptions=False)
    del app.state.repos
    del app.state.chat_relay
    del app.state.assistant


# ── 认证 ──────────────────────────────────────────────────────────────

class TestAuth:
    """测试注册与登录。"""

    def test_register_creates_user_with_newcomer_badge(self, client: TestClient, repos: MagicMock) -> None:
        resp = client.post("/api/auth/register", json={
            "fullName": "Ada Lovelace", "email": "ada@example.com",
            "role": "backend", "level": "senior", "skills": ["python"],
        })

        assert resp.status_code == 200
        body = resp.json()
        assert body["code"] == 200
        assert body["data"]["user"]["fullName"] == "Ada Lovelace"
        assert isinstance(body["data"]["user"]["_id"], str)
        assert decode_token(body["data"]["token"])["userId"] == body["data"]["user"]["_id"]
        badges = repos.users.create.call_args.kwargs["badges"]
        assert [b["name"] for b in badges] == ["Newcomer"]

    def test_register_duplicate_email(self, client: TestClient, repos: MagicMock) -> None:
        repos.users.find_by_email = AsyncMock(return_value=_user())

        resp = client.post("/api/auth/register", json={
            "fullName": "Ada", "email": "ada@example.com", "role": "backend", "level": "senior",
        })

        assert resp.status_code == 400
        assert resp.json() == {"code": 400, "data": None, "msg": "User already exists"}
        repos.users.create.assert_not_called()

    def test_register_race_on_unique_index(self, client: TestClient, repos: MagicMock) -> None:
        """并发注册时 find_by_email 都未命中，由唯一索引拒绝的一方仍得到 400。"""
        repos.users.create = AsyncMock(
            side_effect=DuplicateKeyError("E11000 duplicate key error uniq_email"),
        )

        resp = client.post("/api/auth/register", json={
            "fullName": "Ada", "email": "ada@example.com", "role": "backend", "level": "senior",
        })

        assert resp.status_code == 400
        assert resp.json() == {"code": 400, "data": None, "msg": "User already exists"}

    def test_register_missing_fields(self, client: TestClient) -> None:
        resp = client.post("/api/auth/register", json={"email": "ada@example.com"})

        assert resp.status_code == 422
        assert resp.json()["code"] == 422

    def test_login_unknown_user(self, client: TestClient) -> None:
        resp = client.post("/api/auth/login", json={"email": "nobody@example.com"})

        assert resp.status_code == 400
        assert resp.json()["msg"] == "User not found"

    def test_login_refreshes_last_active(self, client: TestClient, repos: MagicMock) -> None:
        user = _user()
        repos.users.find_by_email = AsyncMock(return_value=user)

        resp = client.post("/api/auth/login", json={"email": "ada@example.com"})

        assert resp.status_code == 200
        repos.users.touch_last_active.assert_awaited_once_with(user["_id"])
        assert decode_token(resp.json()["data"]["token"])["userId"] == str(user["_id"])


# ── 项目 / API 目录 / 课程 ────────────────────────────────────────────

class TestContent:
    """测试项目、API 目录与课程接口。"""

    def test_create_project_awards_first_project_badge(self, client: TestClient, repos: MagicMock) -> None:
        owner = str(ObjectId())

        resp = client.post("/api/projects", json={
            "title": "Arena", "description": "A chat app", "owner": owner, "tags": ["python"],
        })

        assert resp.status_code == 200
        assert resp.json()["data"]["title"] == "Arena"
        owner_arg, badge = repos.users.award_badge.call_args.args
        assert owner_arg == owner
        assert badge["name"] == "First Project"

    def test_create_project_without_owner_awards_nothing(self, client: TestClient, repos: MagicMock) -> None:
        resp = client.post("/api/projects", json={"title": "Arena", "description": "A chat app"})

        assert resp.status_code == 200
        repos.users.award_badge.assert_not_called()

    def test_list_projects(self, client: TestClient, repos: MagicMock) -> None:
        project = {"_id": ObjectId(), "title": "Arena", "owner": {"_id": ObjectId(), "fullName": "Ada"}}
        repos.projects.list_public = AsyncMock(return_value=[project])

        resp = client.get("/api/projects")

        assert resp.status_code == 200
        assert resp.json()["data"][0]["owner"]["fullName"] == "Ada"
        repos.projects.list_public.assert_awaited_once_with(limit=12)

    def test_list_apis_merges_builtin_and_approved(self, client: TestClient, repos: MagicMock) -> None:
        repos.apis.list_approved = AsyncMock(return_value=[{"_id": ObjectId(), "name": "Mine"}])

        resp = client.get("/api/apis")

        names = [api["name"] for api in resp.json()["data"]]
        assert names[0] == "JSONPlaceholder"
        assert names[-1] == "Mine"
        assert len(names) == 7

    def test_submit_api(self, client: TestClient) -> None:
        resp = client.post("/api/apis", json={
            "name": "Jokes", "description": "Random jokes", "endpoint": "https://example.com/jokes",
        })

        assert resp.status_code == 200
        assert resp.json()["data"]["isApproved"] is False

    def test_try_missing_api(self, client: TestClient) -> None:
        resp = client.get(f"/api/apis/{ObjectId()}/test")

        assert resp.status_code == 404
        assert resp.json()["msg"] == "API not found"

    def test_try_api_counts_usage(self, client: TestClient, repos: MagicMock) -> None:
        repos.apis.increment_usage = AsyncMock(return_value={"_id": ObjectId(), "name": "Jokes", "usageCount": 1})

        resp = client.get("/api/apis/abc/test")

        assert resp.status_code == 200
        assert resp.json()["data"]["api"] == "Jokes"
        assert resp.json()["data"]["message"] == "API test successful"

    def test_list_lessons(self, client: TestClient, repos: MagicMock) -> None:
        resp = client.get("/api/lessons")

        assert resp.status_code == 200
        repos.lessons.list_ordered.assert_awaited_once_with(limit=9)


# ── AI 助手 ───────────────────────────────────────────────────────────

class TestAssistantEndpoint:

    def test_ask(self, client: TestClient, assistant: MagicMock) -> None:
        resp = client.post("/api/ai/ask", json={"question": "loop over a list", "mode": "generate"})

        assert resp.status_code == 200
        assert resp.json()["data"]["answer"] == "Use a for loop."
        assistant.ask.assert_awaited_once_with("loop over a list", "generate")

    def test_empty_question_rejected(self, client: TestClient) -> None:
        resp = client.post("/api/ai/ask", json={"question": ""})

        assert resp.status_code == 422


# ── 统计与管理后台 ────────────────────────────────────────────────────

class TestStatsAndAdmin:
    """测试统计与管理员鉴权。"""

    def test_stats_reports_online_users_from_presence(self, client: TestClient, relay: ChatRelay) -> None:
        relay.presence.announce("sid-a", {"_id": "u1"})
        relay.presence.announce("sid-b", {"_id": "u2"})

        resp = client.get("/api/stats")

        assert resp.json()["data"] == {
            "onlineUsers": 2,
            "totalUsers": 10,
            "totalProjects": 4,
            "availableAPIs": 8,
            "activeChallenges": 1,
        }

    def test_dashboard_requires_token(self, client: TestClient) -> None:
        resp = client.get("/api/admin/dashboard")

        assert resp.status_code == 401
        assert resp.json()["msg"] == "Unauthorized"

    def test_dashboard_rejects_invalid_token(self, client: TestClient) -> None:
        resp = client.get("/api/admin/dashboard", headers={"Authorization": "Bearer not-a-jwt"})

        assert resp.status_code == 401

    def test_dashboard_rejects_non_admin(self, client: TestClient, repos: MagicMock) -> None:
        user = _user(isAdmin=False)
        repos.users.find_by_id = AsyncMock(return_value=user)
        token = create_access_token(str(user["_id"]))

        resp = client.get("/api/admin/dashboard", headers={"Authorization": f"Bearer {token}"})

        assert resp.status_code == 403
        assert resp.json()["msg"] == "Admin access required"

    def test_dashboard_for_admin(self, client: TestClient, repos: MagicMock) -> None:
        admin = _user(isAdmin=True)
        repos.users.find_by_id = AsyncMock(return_value=admin)
        token = create_access_token(str(admin["_id"]))

        resp = client.get("/api/admin/dashboard", headers={"Authorization": f"Bearer {token}"})

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["pendingApprovals"] == 3
        assert data["totalMessages"] == 42
        assert data["systemHealth"] == "Operational"
        assert len(data["recentUsers"]) == 1
        repos.users.find_by_id.assert_awaited_once_with(str(admin["_id"]))


# ── 上传与页面 ────────────────────────────────────────────────────────

class TestUploadAndPages:

    def test_upload_writes_file(
        self, client: TestClient, tmp_path: Any, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path))

        resp = client.post("/api/upload", files={"file": ("../notes.txt", b"hello", "text/plain")})

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["filename"].endswith("-notes.txt")
        assert data["url"] == f"/uploads/{data['filename']}"
        assert (tmp_path / data["filename"]).read_bytes() == b"hello"

    def test_admin_page_redirects_home(self, client: TestClient) -> None:
        resp = client.get("/admin", follow_redirects=False)

        assert resp.status_code in (302, 307)
        assert resp.headers["location"] == "/"

    def test_health(self, client: TestClient) -> None:
        resp = client.get("/health")

        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"
        assert resp.json()["database"] == "down"
        assert "X-Request-ID" in resp.headers


class TestFrontendStatic:
    """测试前端静态资源挂载。"""

    @pytest.fixture()
    def frontend(self, tmp_path: Any, monkeypatch: pytest.MonkeyPatch) -> Any:
        (tmp_path / "index.html").write_text("<h1>Devs Arena</h1>", encoding="utf-8")
        (tmp_path / "style.css").write_text("body { margin: 0; }", encoding="utf-8")
        (tmp_path / "js").mkdir()
        (tmp_path / "js" / "app.js").write_text("console.log('arena');", encoding="utf-8")

        mount = next(route for route in app.routes if getattr(route, "name", None) == "frontend")
        monkeypatch.setattr(mount, "app", StaticFiles(directory=tmp_path, html=True))
        return tmp_path

    def test_index_page(self, client: TestClient, frontend: Any) -> None:
        resp = client.get("/")

        assert resp.status_code == 200
        assert "Devs Arena" in resp.text

    def test_assets_are_served(self, client: TestClient, frontend: Any) -> None:
        css = client.get("/style.css")
        js = client.get("/js/app.js")

        assert css.status_code == 200
        assert css.text == "body { margin: 0; }"
        assert js.status_code == 200
        assert "arena" in js.text

    def test_missing_asset(self, client: TestClient, frontend: Any) -> None:
        resp = client.get("/nope.css")

        assert resp.status_code == 404
        assert resp.json()["code"] == 404

    def test_api_routes_are_not_shadowed(self, client: TestClient, frontend: Any) -> None:
        """静态挂载在 "/"，但 /api、/health、/admin 仍由各自的路由处理。"""
        assert client.get("/api/lessons").json()["code"] == 200
        assert client.get("/health").json()["status"] == "ok"
        assert client.get("/admin", follow_redirects=False).headers["location"] == "/"
