"""HTTP client for the BugSage JSON API, used by the client views and the CLI."""

from typing import Any

import httpx

DEFAULT_TIMEOUT_SEC = 30.0


class ApiError(Exception):
    """Raised when the API answers with a failure envelope or a non-JSON error."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class BugSageClient:
    """
    Thin wrapper over the API. The session cookie set at login/register is kept
    by the underlying httpx client and sent on every later call.

    Pass an existing httpx.Client (e.g. FastAPI's TestClient) to reuse its
    transport; otherwise one is created for base_url.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        api_prefix: str = "/api",
        http: httpx.Client | None = None,
        timeout: float = DEFAULT_TIMEOUT_SEC,
    ) -> None:
        self._http = http or httpx.Client(base_url=base_url, timeout=timeout)
        self._owns_http = http is None
        self._prefix = api_prefix.rstrip("/")

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "BugSageClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        resp = self._http.request(method, f"{self._prefix}{path}", json=json, params=params)
        try:
            body = resp.json()
        except ValueError as e:
            raise ApiError(
                f"API returned {resp.status_code}: {resp.text[:500] or 'empty body'}",
                resp.status_code,
            ) from e
        if resp.status_code >= 400 or not body.get("success", False):
            raise ApiError(body.get("message") or f"API returned {resp.status_code}", resp.status_code)
        return body

    # auth

    def login(self, username: str, password: str) -> dict[str, Any]:
        body = self._request("POST", "/auth", json={"action": "login", "username": username, "password": password})
        return body["user"]

    def register(self, username: str, email: str, password: str, confirm_password: str) -> dict[str, Any]:
        body = self._request(
            "POST",
            "/auth",
            json={
                "action": "register",
                "username": username,
                "email": email,
                "password": password,
                "confirmPassword": confirm_password,
            },
        )
        return body["user"]

    def logout(self) -> None:
        self._request("POST", "/auth", json={"action": "logout"})

    def me(self) -> dict[str, Any]:
        return self._request("GET", "/auth")["user"]

    # bugs

    def list_bugs(self, page: int = 1, limit: int | None = None, **filters: Any) -> dict[str, Any]:
        """Returns {"bugs": [...], "pagination": {...}}; None filters are not sent."""
        params: dict[str, Any] = {"page": page}
        if limit is not None:
            params["limit"] = limit
        params.update({k: v for k, v in filters.items() if v is not None})
        body = self._request("GET", "/bugs", params=params)
        return {"bugs": body["bugs"], "pagination": body["pagination"]}

    def get_bug(self, bug_id: int) -> dict[str, Any]:
        return self._request("GET", f"/bugs/{bug_id}")["bug"]

    def check_duplicates(self, title: str) -> list[dict[str, Any]]:
        """Bugs not yet closed with a similar title (id, title, priority, status)."""
        return self._request("POST", "/bugs/check-duplicates", json={"title": title})["duplicates"]

    def create_bug(self, title: str, description: str, project_id: int, **fields: Any) -> dict[str, Any]:
        payload = {"title": title, "description": description, "project_id": project_id, **fields}
        return self._request("POST", "/bugs", json=payload)["bug"]

    def update_bug(self, bug_id: int, **fields: Any) -> None:
        self._request("PUT", "/bugs", json={"id": bug_id, **fields})

    def update_bug_status(self, bug_id: int, status: str) -> None:
        self._request("POST", "/bugs/status", json={"bug_id": bug_id, "status": status})

    def delete_bug(self, bug_id: int) -> None:
        self._request("DELETE", "/bugs", json={"id": bug_id})

    # projects

    def list_projects(self) -> list[dict[str, Any]]:
        return self._request("GET", "/projects")["projects"]

    def create_project(self, name: str, description: str = "", status: str | None = None) -> int:
        payload: dict[str, Any] = {"name": name, "description": description}
        if status:
            payload["status"] = status
        return self._request("POST", "/projects", json=payload)["project_id"]

    def update_project(self, project_id: int, **fields: Any) -> None:
        self._request("PUT", "/projects", json={"id": project_id, **fields})

    def delete_project(self, project_id: int) -> None:
        self._request("DELETE", "/projects", json={"id": project_id})

    # aggregates and users

    def dashboard(self) -> dict[str, Any]:
        return self._request("GET", "/dashboard")

    def report(self, range_key: str = "30d") -> dict[str, Any]:
        return self._request("GET", "/reports", params={"range": range_key})

    def list_users(self) -> list[dict[str, Any]]:
        return self._request("GET", "/users")["users"]

    def create_user(self, username: str, email: str, password: str, role: str = "user") -> dict[str, Any]:
        payload = {"username": username, "email": email, "password": password, "role": role}
        return self._request("POST", "/users", json=payload)["user"]

    def update_user(self, user_id: int, **fields: Any) -> None:
        self._request("PUT", "/users", json={"id": user_id, **fields})
