"""
Async HTTP client for the Task Board API.

Credentials live in an explicit `Session` object passed to the client, never
in module state. A 401 from any endpoint clears the session and fires its
`on_expired` hook (the login redirect of a UI); a 403 leaves it untouched.
"""

from typing import Any, Callable, Dict, List, Optional

import httpx

from taskboard.core.logging import get_logger

logger = get_logger(__name__)


class ApiError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, detail: Any = None):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"{status_code}: {detail}")


class SessionExpiredError(ApiError):
    """401 response; the session has already been cleared."""

    def __init__(self, detail: Any = None):
        super().__init__(401, detail)


class Session:
    """
    Holds the bearer token of one logged-in user.

    Args:
        token: Initial token, if already known
        on_expired: Called with no arguments after a 401 cleared the token
    """

    def __init__(self, token: Optional[str] = None, on_expired: Callable[[], None] = None):
        self.token = token
        self.on_expired = on_expired

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def save(self, token: Optional[str]):
        if token:
            self.token = token

    def clear(self):
        self.token = None

    def auth_headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}


class TaskBoardClient:
    """
    Thin wrapper around the REST endpoints.

    Usage:
        session = Session(on_expired=show_login)
        async with httpx.AsyncClient(base_url="http://localhost:8000/api") as http:
            api = TaskBoardClient(http, session)
            await api.login("alice@example.com", "Password1!")
            teams = await api.get_teams()
    """

    def __init__(self, http: httpx.AsyncClient, session: Session):
        self.http = http
        self.session = session

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        headers = {**kwargs.pop("headers", {}), **self.session.auth_headers()}
        response = await self.http.request(method, url, headers=headers, **kwargs)

        if response.status_code == 401:
            logger.warning("Unauthorized (401). Clearing session.")
            self.session.clear()
            if self.session.on_expired:
                self.session.on_expired()
            raise SessionExpiredError(self._detail(response))

        if response.status_code >= 400:
            if response.status_code == 403:
                logger.warning(f"Forbidden (403) on {method} {url}")
            raise ApiError(response.status_code, self._detail(response))

        if not response.content:
            return None
        return response.json()

    @staticmethod
    def _detail(response: httpx.Response) -> Any:
        try:
            return response.json().get("detail")
        except ValueError:
            return response.text

    # --- Auth ---

    async def register(self, name: str, email: str, password: str) -> Dict:
        data = await self._request("POST", "/auth/register", json={"name": name, "email": email, "password": password})
        self.session.save(data.get("token"))
        return data

    async def login(self, email: str, password: str) -> Dict:
        data = await self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.session.save(data.get("token"))
        return data

    async def logout(self):
        """Revoke the token server-side (best effort) and clear the session."""
        try:
            if self.session.is_authenticated:
                await self._request("POST", "/auth/logout")
        finally:
            self.session.clear()

    # --- Teams ---

    async def get_teams(self) -> List[Dict]:
        return await self._request("GET", "/teams/")

    async def create_team(self, name: str, description: Optional[str] = None) -> Dict:
        return await self._request("POST", "/teams/", json={"name": name, "description": description})

    async def get_available_teams(self) -> List[Dict]:
        return await self._request("GET", "/teams/available-to-join")

    async def join_team_by_code(self, code: str) -> Dict:
        return await self._request("POST", "/teams/join-by-code", json={"code": code})

    async def get_team_members(self, team_id: int) -> List[Dict]:
        return await self._request("GET", f"/teams/{team_id}/members")

    async def add_member_to_team(self, team_id: int, email: str, role: str = "member") -> Dict:
        return await self._request("POST", f"/teams/{team_id}/members", json={"email": email, "role": role})

    # --- Projects ---

    async def get_projects(self, team_id: Optional[int] = None) -> List[Dict]:
        params = {"teamId": team_id} if team_id else None
        return await self._request("GET", "/projects/", params=params)

    async def create_project(self, team_id: int, name: str) -> Dict:
        return await self._request("POST", "/projects/", json={"name": name, "teamId": team_id})

    # --- Tasks ---

    async def get_tasks(self, project_id: Optional[int] = None) -> List[Dict]:
        params = {"projectId": project_id} if project_id else None
        return await self._request("GET", "/tasks/", params=params)

    async def create_task(self, task: Dict) -> Dict:
        return await self._request("POST", "/tasks/", json=task)

    async def update_task(self, task_id: int, updates: Dict) -> Dict:
        return await self._request("PATCH", f"/tasks/{task_id}", json=updates)

    async def delete_task(self, task_id: int) -> Dict:
        return await self._request("DELETE", f"/tasks/{task_id}")

    # --- Comments ---

    async def get_comments(self, task_id: int) -> List[Dict]:
        return await self._request("GET", "/comments/", params={"taskId": task_id})

    async def create_comment(self, task_id: int, body: str) -> Dict:
        return await self._request("POST", "/comments/", json={"taskId": task_id, "body": body})
