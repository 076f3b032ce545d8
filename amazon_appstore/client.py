"""
Amazon Appstore submission API client.

Every operation checks authentication, composes the resource path, attaches
the stored ETag as If-Match on writes and deletes, and records the ETag the
service returns.
"""

from __future__ import annotations

import os
import time
from typing import TYPE_CHECKING, Any
from urllib.parse import urljoin

from .auth import DEFAULT_TOKEN_URL, AuthManager, Clock
from .errors import AppstoreError, AuthenticationError
from .etags import ETagStore, etag_key
from .httpclient import UrllibHTTPClient
from .request import (
    FilePart,
    JsonBody,
    MultipartBody,
    OutboundRequest,
    RawStreamBody,
    RequestBuilder,
)
from .types import Credentials, JSONObject
from .utils import mime_type_for_file

if TYPE_CHECKING:
    from .httpclient import HTTPClient
    from .logger import Logger

DEFAULT_BASE_URL = "https://developer.amazon.com/api/appstore/"
APK_MIME_TYPE = "application/vnd.android.package-archive"


class AmazonAppstoreClient:
    """Client for one authenticated session against the Appstore submission API"""

    def __init__(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
        *,
        credentials: Credentials | None = None,
        http_client: HTTPClient | None = None,
        base_url: str = DEFAULT_BASE_URL,
        token_url: str = DEFAULT_TOKEN_URL,
        clock: Clock = time.time,
        logger: Logger | None = None,
    ) -> None:
        from .logger import new_logger

        self._logger = logger or new_logger()
        self._base_url = base_url
        self._http_client = http_client or UrllibHTTPClient(logger=self._logger)
        self._request_builder = RequestBuilder()
        self._auth = AuthManager(
            client_id,
            client_secret,
            self._http_client,
            token_url=token_url,
            credentials=credentials,
            request_builder=self._request_builder,
            clock=clock,
            logger=self._logger,
        )
        self._etags = ETagStore()

    @property
    def client_id(self) -> str | None:
        return self._auth.client_id

    @client_id.setter
    def client_id(self, value: str | None) -> None:
        self._auth.client_id = value

    @property
    def client_secret(self) -> str | None:
        return self._auth.client_secret

    @client_secret.setter
    def client_secret(self, value: str | None) -> None:
        self._auth.client_secret = value

    @property
    def credentials(self) -> Credentials | None:
        return self._auth.credentials

    @property
    def last_authenticated(self) -> float | None:
        """Time the current credentials were issued, in seconds since the epoch"""
        return self._auth.issued_at

    @property
    def etag_store(self) -> ETagStore:
        return self._etags

    # Authentication

    def authenticate_if_needed(self) -> Credentials:
        """Get a new access token only if the current one is missing or expired"""
        return self._auth.authenticate_if_needed()

    def needs_authentication(self) -> bool:
        return self._auth.needs_authentication()

    def authenticate(self) -> Credentials:
        """Authenticate regardless of previous session status"""
        return self._auth.authenticate()

    # Edits

    def get_active_edit(self, app_id: str) -> JSONObject | None:
        """Return the open edit for the app, or None when no edit is open"""
        edit, etag = self._get(f"v1/applications/{app_id}/edits")
        if not edit:
            return None
        self._remember(edit.get("id"), etag)
        return edit

    def create_edit(self, app_id: str) -> JSONObject:
        """
        Create a new edit populated from the live version of the app.
        Fails if an edit is already open for the app.
        """
        edit, etag = self._post(f"v1/applications/{app_id}/edits")
        edit = edit or {}
        self._remember(edit.get("id"), etag)
        self._logger.infof("Created edit %s for app %s", edit.get("id"), app_id)
        return edit

    def get_edit(self, edit_id: str, *, app_id: str) -> JSONObject:
        edit, etag = self._get(f"v1/applications/{app_id}/edits/{edit_id}")
        self._remember(edit_id, etag)
        return edit

    def delete_edit(self, edit_id: str, *, app_id: str) -> None:
        self._delete(f"v1/applications/{app_id}/edits/{edit_id}", etag=self._etags.get(edit_id))
        self._etags.remove(edit_id)

    def validate_edit(self, edit_id: str, *, app_id: str) -> JSONObject:
        """
        Check that the changes in the edit are valid. The service answers 403
        with the list of validation errors otherwise, raised as ApiError.
        """
        path = f"v1/applications/{app_id}/edits/{edit_id}/validate"
        edit, etag = self._post(path, etag=self._etags.get(edit_id))
        self._remember(edit_id, etag)
        return edit

    def commit_edit(self, edit_id: str, *, app_id: str) -> JSONObject:
        """Submit the edit, making its changes live if all validations succeed"""
        path = f"v1/applications/{app_id}/edits/{edit_id}/commit"
        edit, etag = self._post(path, etag=self._etags.get(edit_id))
        self._remember(edit_id, etag)
        self._logger.infof("Committed edit %s for app %s", edit_id, app_id)
        return edit

    # Listings

    def get_listings(self, *, edit_id: str, app_id: str) -> dict[str, JSONObject]:
        """Return every localized listing, keyed by language"""
        listings, _ = self._get(f"v1/applications/{app_id}/edits/{edit_id}/listings")
        return (listings or {}).get("listings", {})

    def get_listing(self, language: str, *, edit_id: str, app_id: str) -> JSONObject:
        path = f"v1/applications/{app_id}/edits/{edit_id}/listings/{language}"
        listing, etag = self._get(path)
        self._remember(etag_key(edit_id, language), etag)
        return listing

    def update_listing(
        self, listing: JSONObject, *, edit_id: str, app_id: str, language: str | None = None
    ) -> JSONObject:
        """Replace the localized listing; the language defaults to listing["language"]"""
        language = language or listing.get("language")
        if not language:
            raise ValueError("listing language is required")
        key = etag_key(edit_id, language)
        path = f"v1/applications/{app_id}/edits/{edit_id}/listings/{language}"
        updated, etag = self._put(path, JsonBody(listing), etag=self._etags.get(key))
        self._remember(key, etag)
        return updated

    def delete_listing(self, language: str, *, edit_id: str, app_id: str) -> None:
        """Remove a localized listing. The default language cannot be removed."""
        key = etag_key(edit_id, language)
        path = f"v1/applications/{app_id}/edits/{edit_id}/listings/{language}"
        self._delete(path, etag=self._etags.get(key))
        self._etags.remove(key)

    # Details

    def get_details(self, *, edit_id: str, app_id: str) -> JSONObject:
        details, etag = self._get(f"v1/applications/{app_id}/edits/{edit_id}/details")
        self._remember(etag_key(edit_id, "details"), etag)
        return details

    def update_details(self, details: JSONObject, *, edit_id: str, app_id: str) -> JSONObject:
        """Update contact information and other details. The default language cannot change."""
        key = etag_key(edit_id, "details")
        path = f"v1/applications/{app_id}/edits/{edit_id}/details"
        updated, etag = self._put(path, JsonBody(details), etag=self._etags.get(key))
        self._remember(key, etag)
        return updated

    # APKs

    def get_apks(self, *, edit_id: str, app_id: str) -> list[JSONObject]:
        apks, _ = self._get(f"v1/applications/{app_id}/edits/{edit_id}/apks")
        return apks or []

    def get_apk(self, apk_id: str, *, edit_id: str, app_id: str) -> JSONObject:
        apk, etag = self._get(f"v1/applications/{app_id}/edits/{edit_id}/apks/{apk_id}")
        self._remember(apk_id, etag)
        return apk

    def delete_apk(self, apk_id: str, *, edit_id: str, app_id: str) -> None:
        path = f"v1/applications/{app_id}/edits/{edit_id}/apks/{apk_id}"
        self._delete(path, etag=self._etags.get(apk_id))
        self._etags.remove(apk_id)

    def replace_apk(
        self, apk_id: str, *, apk_filepath: str, edit_id: str, app_id: str
    ) -> JSONObject:
        """Replace an APK's binary; the service keeps its targeting information"""
        path = f"v1/applications/{app_id}/edits/{edit_id}/apks/{apk_id}/replace"
        apk, etag = self._upload_file("PUT", path, apk_filepath, etag=self._etags.get(apk_id))
        self._remember(apk_id, etag)
        return apk

    def upload_apk(self, apk_filepath: str, *, edit_id: str, app_id: str) -> JSONObject:
        """Upload a new APK and attach it to the edit"""
        path = f"v1/applications/{app_id}/edits/{edit_id}/apks/upload"
        apk, _ = self._upload_file("POST", path, apk_filepath)
        return apk

    def upload_large_apk(self, apk_filepath: str, *, edit_id: str, app_id: str) -> str:
        """
        Stage a large APK and return its file identifier.

        The staged file is not part of the edit until it is passed to
        attach_apk.
        """
        path = f"v1/applications/{app_id}/edits/{edit_id}/apks/large/upload"
        filename = os.path.basename(apk_filepath)
        with open(apk_filepath, "rb") as stream:
            body = MultipartBody(
                [FilePart("file", stream, filename=filename, content_type=APK_MIME_TYPE)]
            )
            upload_metadata, _ = self._post(path, body, headers={"fileName": filename})
        file_id = (upload_metadata or {}).get("fileId")
        if not file_id:
            raise AppstoreError(f"large upload of {filename} returned no fileId")
        self._logger.infof("Staged %s as file %s", filename, file_id)
        return file_id

    def attach_apk(self, file_id: str, *, edit_id: str, app_id: str) -> JSONObject:
        """Attach an APK staged with upload_large_apk to the edit"""
        path = f"v1/applications/{app_id}/edits/{edit_id}/apks/attach"
        apk, _ = self._post(path, JsonBody({"fileId": file_id}))
        return apk

    # Images

    def get_images(
        self, image_type: str, *, language: str, edit_id: str, app_id: str
    ) -> list[str]:
        """Return the asset ids of all images of image_type for the listing"""
        path = f"v1/applications/{app_id}/edits/{edit_id}/listings/{language}/{image_type}"
        images, etag = self._get(path)
        self._remember(etag_key(edit_id, language), etag)
        return [image["id"] for image in (images or {}).get("images", [])]

    def upload_image(
        self, filepath: str, *, image_type: str, language: str, edit_id: str, app_id: str
    ) -> str:
        """
        Upload an image to the listing and return its asset id. Image types
        that hold a single image (such as icons) have it replaced.
        """
        key = etag_key(edit_id, language)
        path = f"v1/applications/{app_id}/edits/{edit_id}/listings/{language}/{image_type}/upload"
        image_metadata, etag = self._upload_file("POST", path, filepath, etag=self._etags.get(key))
        self._remember(key, etag)
        return image_metadata["image"]["id"]

    def delete_image(
        self, asset_id: str, *, image_type: str, language: str, edit_id: str, app_id: str
    ) -> None:
        key = etag_key(edit_id, language)
        path = (
            f"v1/applications/{app_id}/edits/{edit_id}/listings/{language}/{image_type}/{asset_id}"
        )
        _, etag = self._delete(path, etag=self._etags.get(key))
        self._remember(key, etag)

    def delete_all_images(
        self, image_type: str, *, language: str, edit_id: str, app_id: str
    ) -> None:
        key = etag_key(edit_id, language)
        path = f"v1/applications/{app_id}/edits/{edit_id}/listings/{language}/{image_type}"
        _, etag = self._delete(path, etag=self._etags.get(key))
        self._remember(key, etag)

    # Videos

    def get_videos(self, *, language: str, edit_id: str, app_id: str) -> list[str]:
        path = f"v1/applications/{app_id}/edits/{edit_id}/listings/{language}/videos"
        videos, etag = self._get(path)
        self._remember(etag_key(edit_id, language), etag)
        return [video["id"] for video in (videos or {}).get("videos", [])]

    def upload_video(self, filepath: str, *, language: str, edit_id: str, app_id: str) -> str:
        """Upload a video to the listing and return its asset id"""
        key = etag_key(edit_id, language)
        # The service accepts uploads on ".../videos/upload", not ".../videos"
        path = f"v1/applications/{app_id}/edits/{edit_id}/listings/{language}/videos/upload"
        video_metadata, etag = self._upload_file("POST", path, filepath, etag=self._etags.get(key))
        self._remember(key, etag)
        return video_metadata["video"]["id"]

    def delete_video(self, asset_id: str, *, language: str, edit_id: str, app_id: str) -> None:
        key = etag_key(edit_id, language)
        path = f"v1/applications/{app_id}/edits/{edit_id}/listings/{language}/videos/{asset_id}"
        _, etag = self._delete(path, etag=self._etags.get(key))
        self._remember(key, etag)

    def delete_all_videos(self, *, language: str, edit_id: str, app_id: str) -> None:
        key = etag_key(edit_id, language)
        path = f"v1/applications/{app_id}/edits/{edit_id}/listings/{language}/videos"
        _, etag = self._delete(path, etag=self._etags.get(key))
        self._remember(key, etag)

    # Availability

    def get_availability(self, *, edit_id: str, app_id: str) -> JSONObject:
        availability, etag = self._get(f"v1/applications/{app_id}/edits/{edit_id}/availability")
        self._remember(etag_key(edit_id, "availability"), etag)
        return availability

    def update_availability(
        self, availability: JSONObject, *, edit_id: str, app_id: str
    ) -> JSONObject:
        key = etag_key(edit_id, "availability")
        path = f"v1/applications/{app_id}/edits/{edit_id}/availability"
        updated, etag = self._put(path, JsonBody(availability), etag=self._etags.get(key))
        self._remember(key, etag)
        return updated

    # Targeting

    def get_targeting(self, *, apk_id: str, edit_id: str, app_id: str) -> JSONObject:
        path = f"v1/applications/{app_id}/edits/{edit_id}/apks/{apk_id}/targeting"
        targeting, etag = self._get(path)
        self._remember(etag_key(apk_id, "targeting"), etag)
        return targeting

    def update_targeting(
        self, targeting: JSONObject, *, apk_id: str, edit_id: str, app_id: str
    ) -> JSONObject:
        """Modify device targeting for the APK"""
        key = etag_key(apk_id, "targeting")
        path = f"v1/applications/{app_id}/edits/{edit_id}/apks/{apk_id}/targeting"
        updated, etag = self._put(path, JsonBody(targeting), etag=self._etags.get(key))
        self._remember(key, etag)
        return updated

    # Request plumbing

    def _remember(self, key: str | None, etag: str | None) -> None:
        if key and etag:
            self._etags.set(key, etag)

    def _get(self, path: str, params: Any = None) -> tuple[Any, str | None]:
        return self._make_request("GET", path, params)

    def _post(
        self,
        path: str,
        body: Any = None,
        *,
        headers: dict[str, str] | None = None,
        etag: str | None = None,
    ) -> tuple[Any, str | None]:
        return self._make_request("POST", path, body, headers=headers, etag=etag)

    def _put(
        self,
        path: str,
        body: Any,
        *,
        headers: dict[str, str] | None = None,
        etag: str | None = None,
    ) -> tuple[Any, str | None]:
        return self._make_request("PUT", path, body, headers=headers, etag=etag)

    def _delete(self, path: str, *, etag: str | None = None) -> tuple[Any, str | None]:
        return self._make_request("DELETE", path, etag=etag)

    def _make_request(
        self,
        method: str,
        path: str,
        body: Any = None,
        *,
        headers: dict[str, str] | None = None,
        etag: str | None = None,
    ) -> tuple[Any, str | None]:
        """Send an authenticated request, returning the decoded body and response ETag"""
        credentials = self._auth.credentials
        if credentials is None or self._auth.needs_authentication():
            raise AuthenticationError("requires authentication")

        request_headers = dict(headers or {})
        request_headers["Authorization"] = f"Bearer {credentials.access_token}"
        if etag:
            request_headers["If-Match"] = etag

        request = self._request_builder.build(
            OutboundRequest(
                url=urljoin(self._base_url, path),
                method=method,
                body=body,
                headers=request_headers,
            )
        )
        response = self._http_client.execute(request)
        return response.body, response.etag

    def _upload_file(
        self, method: str, path: str, filepath: str, *, etag: str | None = None
    ) -> tuple[Any, str | None]:
        """Stream a file as the raw request payload; the file is closed when the call ends"""
        filename = os.path.basename(filepath)
        headers = {"Content-Type": mime_type_for_file(filepath), "fileName": filename}
        with open(filepath, "rb") as stream:
            length = os.fstat(stream.fileno()).st_size
            headers["Content-Length"] = str(length)
            return self._make_request(
                method, path, RawStreamBody(stream, length), headers=headers, etag=etag
            )
