"""
Parse SDK - High-level client with nice ergonomics.

This layer provides a clean interface for common Parse operations.
Built on top of the core APIClient.

Queries are filtered with *filters* and *options*. Filters become the
``where`` clause; options are "order", "limit", "count" and "include".

Example:
    client = ParseClient()

    # Animals aged less than 3 years old
    client.query("classes/Animals", {"age": {"$lt": 3}})

    # Animals that have a name and are still alive, newest first
    client.query(
        "classes/Animals",
        {"name": {"$exists": True}, "status": 1},
        {"order": "-createdAt"},
    )

"""

import urllib.parse
from typing import Any

from parse_client.core.client import (
    DEFAULT_TIMEOUT,
    SESSION_TOKEN_HEADER,
    APIClient,
    Transport,
)
from parse_client.core.errors import APIError
from parse_client.core.types import (
    DEFAULT_BASE_URL,
    Credentials,
    FilterMap,
    OptionsMap,
    ParseFile,
    ParseObject,
    QueryResult,
    Response,
)


def _expect_ok(response: Response, action: str) -> Any:
    """Return the body of a successful response, or raise APIError."""
    if not response.ok:
        raise APIError.from_response(response, action)
    return response.body


def _join(value: str | list[str] | tuple[str, ...]) -> str:
    if isinstance(value, (list, tuple)):
        return ",".join(value)
    return value


class ParseClient:
    """
    High-level Parse REST API client.

    Example:
        client = ParseClient(application_id="app", api_key="key")

        # Raw requests, status left to the caller
        response = client.get("classes/GameScore", {"score": {"$gte": 1000}})
        response = client.post("classes/GameScore", {"score": 1337})

        # Typed helpers
        scores = client.objects.find("GameScore", {"playerName": "Sean"}, order="-score")
        user = client.users.login("cooldude6", "p_n7!-e8")

    """

    def __init__(
        self,
        application_id: str | None = None,
        api_key: str | None = None,
        base_url: str | None = None,
        credentials: Credentials | None = None,
        transport: Transport | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        Initialize the Parse client.

        Args:
            application_id: Parse application id (or PARSE_APPLICATION_ID env var)
            api_key: Parse REST API key (or PARSE_API_KEY env var)
            base_url: API base URL (or PARSE_URL env var)
            credentials: Prebuilt credentials; explicit arguments above still win
            transport: HTTP transport override (defaults to urllib)
            timeout: Request timeout in seconds

        """
        base = credentials or Credentials.from_env()
        self.credentials = Credentials(
            application_id=application_id or base.application_id,
            api_key=api_key or base.api_key,
            base_url=base_url or base.base_url or DEFAULT_BASE_URL,
        )
        self._client = APIClient(self.credentials, transport=transport, timeout=timeout)

        # Sub-clients for different domains
        self.objects = ObjectOperations(self._client)
        self.users = UserOperations(self._client)
        self.files = FileOperations(self._client)

    # =========================================================================
    # Raw requests
    # =========================================================================

    def get(
        self,
        path: str,
        filters: FilterMap | None = None,
        options: OptionsMap | None = None,
        transport_options: dict[str, Any] | None = None,
    ) -> Response:
        """
        Get request, optionally filtered.

        To make a request with options but no filters, pass {} as filters:

            client.get("classes/Animals", {}, {"order": "createdAt"})

        """
        return self._client.get(path, filters, options, transport_options=transport_options)

    def query(
        self,
        path: str,
        filters: FilterMap | None = None,
        options: OptionsMap | None = None,
    ) -> Any:
        """Get request that returns only the body of the response."""
        return self.get(path, filters, options).body

    def post(self, path: str, body: Any, transport_options: dict[str, Any] | None = None) -> Response:
        """
        Request to create an object.

            client.post("classes/Animals", {"animal": "parrot", "name": "NorwegianBlue", "status": 0})

        """
        return self._client.post(path, body, transport_options=transport_options)

    def put(self, path: str, body: Any) -> Response:
        """Request to update an object."""
        return self._client.put(path, body)

    def delete(self, path: str) -> Response:
        """Request to delete an object."""
        return self._client.delete(path)


# =============================================================================
# Object Operations
# =============================================================================


class ObjectOperations:
    """Typed CRUD and queries on classes/<ClassName>."""

    def __init__(self, client: APIClient):
        self._client = client

    @staticmethod
    def _path(class_name: str, object_id: str | None = None) -> str:
        path = f"classes/{class_name}"
        return f"{path}/{object_id}" if object_id else path

    def find(
        self,
        class_name: str,
        where: FilterMap | None = None,
        order: str | list[str] | None = None,
        limit: int | None = None,
        skip: int | None = None,
        count: bool = False,
        include: str | list[str] | None = None,
        keys: str | list[str] | None = None,
    ) -> QueryResult:
        """
        Query objects of a class.

        Args:
            class_name: Parse class name
            where: Filters, e.g. {"score": {"$gte": 1000}}
            order: Sort key(s); prefix with "-" for descending
            limit: Max results (0 with count=True returns only the count)
            skip: Number of results to skip
            count: Also return the total number of matches
            include: Pointer field(s) to return as full objects
            keys: Restrict returned fields

        Returns:
            QueryResult with parsed objects and the count when requested

        Raises:
            APIError: If the API answers with a non-success status

        """
        options: dict[str, Any] = {}
        if order:
            options["order"] = _join(order)
        if limit is not None:
            options["limit"] = limit
        if skip is not None:
            options["skip"] = skip
        if count:
            options["count"] = 1
        if include:
            options["include"] = _join(include)
        if keys:
            options["keys"] = _join(keys)

        response = self._client.get(self._path(class_name), where, options)
        return QueryResult.from_dict(_expect_ok(response, f"Query on {class_name}"), class_name)

    def first(self, class_name: str, where: FilterMap | None = None, order: str | None = None) -> ParseObject | None:
        """Get the first object matching a query, or None."""
        result = self.find(class_name, where, order=order, limit=1)
        return result.results[0] if result.results else None

    def get(self, class_name: str, object_id: str, include: str | list[str] | None = None) -> ParseObject:
        """Get an object by id."""
        options = {"include": _join(include)} if include else None
        response = self._client.get(self._path(class_name, object_id), options=options)
        data = _expect_ok(response, f"Get {class_name}/{object_id}")
        return ParseObject.from_dict(data, class_name)

    def create(self, class_name: str, data: dict[str, Any]) -> ParseObject:
        """
        Create an object.

        Returns:
            ParseObject with the new objectId and createdAt, plus the submitted fields

        """
        response = self._client.post(self._path(class_name), data)
        created = _expect_ok(response, f"Create {class_name}")
        return ParseObject.from_dict({**data, **created}, class_name)

    def update(self, class_name: str, object_id: str, data: dict[str, Any]) -> ParseObject:
        """Update fields of an object."""
        response = self._client.put(self._path(class_name, object_id), data)
        updated = _expect_ok(response, f"Update {class_name}/{object_id}")
        return ParseObject.from_dict({**data, **updated, "objectId": object_id}, class_name)

    def delete(self, class_name: str, object_id: str) -> Response:
        """Delete an object. The status is left to the caller."""
        return self._client.delete(self._path(class_name, object_id))


# =============================================================================
# User Operations
# =============================================================================


class UserOperations:
    """Signup, login and session handling."""

    def __init__(self, client: APIClient):
        self._client = client

    def signup(self, username: str, password: str, extra: dict[str, Any] | None = None) -> Any:
        """
        Sign up a new user.

        Args:
            username: Username
            password: Password
            extra: Additional fields such as email or phone

        Returns:
            Response body (objectId, createdAt and sessionToken on success)

        """
        data = {"username": username, "password": password, **(extra or {})}
        return self._client.post("users", data).body

    def login(self, username: str, password: str) -> Any:
        """Log in a user. Returns the response body (user fields and sessionToken on success)."""
        params = urllib.parse.urlencode({"username": username, "password": password})
        return self._client.get(f"login?{params}").body

    def request_password_reset(self, email: str) -> Response:
        """Ask the API to send a password reset email."""
        return self._client.post("requestPasswordReset", {"email": email})

    def validate(self, session_token: str) -> Any:
        """Get the user a session token belongs to. Returns the response body."""
        return self._client.get("users/me", headers={SESSION_TOKEN_HEADER: session_token}).body

    def delete(self, object_id: str, session_token: str) -> Response:
        """Delete a user; requires that user's session token."""
        return self._client.delete(f"users/{object_id}", headers={SESSION_TOKEN_HEADER: session_token})


# =============================================================================
# File Operations
# =============================================================================


class FileOperations:
    """File uploads."""

    def __init__(self, client: APIClient):
        self._client = client

    def upload(self, name: str, contents: bytes | str, content_type: str) -> Response:
        """
        Upload a file.

        Args:
            name: File name (the API prefixes it to make it unique)
            contents: Raw file contents
            content_type: MIME type sent as Content-Type

        Returns:
            Response; on success the body holds the stored name and url

        """
        if isinstance(contents, str):
            contents = contents.encode("utf-8")
        path = f"files/{urllib.parse.quote(name)}"
        return self._client.post(path, contents, headers={"Content-Type": content_type})

    def upload_file(self, name: str, contents: bytes | str, content_type: str) -> ParseFile:
        """Upload a file and return the stored reference, raising APIError on failure."""
        response = self.upload(name, contents, content_type)
        return ParseFile.from_dict(_expect_ok(response, f"Upload {name}"))
