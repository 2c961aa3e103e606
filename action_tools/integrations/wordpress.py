"""
WordPress tool: posts, pages, taxonomy, post meta and featured images.

Every action authenticates first by exchanging the configured username and
password for a JWT (``/wp-json/jwt-auth/v1/token``), then calls the core
``/wp-json/wp/v2`` REST endpoints with the bearer token.
"""
from __future__ import annotations

import base64
import binascii
import os
import uuid
from datetime import datetime
from typing import Any, ClassVar, Dict, List, Literal, Optional

from pydantic import Field, field_validator

from action_tools.tools.action import ActionTool, InvocationContext, action
from action_tools.tools.credentials import PasswordTokenExchange
from action_tools.tools.exceptions import ToolCredentialsMissingError, ToolResponseError
from action_tools.tools.http import RestClient, require
from action_tools.tools.schema import ActionRequest, AllOf, AnyOf
from utils.logger import get_logger

logger = get_logger(__name__)

TOKEN_PATH = "/wp-json/jwt-auth/v1/token"
API_PREFIX = "/wp-json/wp/v2"

DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 20

POST_FIELDS = ("title", "content", "status", "tags", "categories", "date")
TERM_FIELDS = ("name", "description")
IMAGE_META_FIELDS = ("imageTitle", "caption", "altText")

_POST_ID = AllOf(("postId",), "postId is required for this action.")
_TERM_ID = AllOf(("termId",), "termId is required for this action.")
_TERM_NAME = AllOf(("name",), "name is required for this action.")
_TERM_UPDATE = AnyOf(TERM_FIELDS, "Provide at least one of name or description to update.")


class WordPressRequest(ActionRequest):
    action: Literal[
        "createPost",
        "editPost",
        "deletePost",
        "listPosts",
        "listPaginatedPosts",
        "searchPosts",
        "listCategories",
        "addCategory",
        "updateCategory",
        "deleteCategory",
        "listTags",
        "addTag",
        "updateTag",
        "deleteTag",
        "getPostMeta",
        "updatePostMeta",
        "searchByMeta",
        "setFeaturedImage",
        "updateImageMeta",
    ] = Field(description="The action to perform on WordPress.")
    postId: Optional[int] = Field(None, description="ID of the post or page to act on.")
    title: Optional[str] = Field(None, min_length=1, description="Title of the post or page.")
    content: Optional[str] = Field(None, min_length=1, description="Content of the post or page.")
    status: Optional[Literal["draft", "publish", "future", "pending", "private"]] = Field(
        None, description="Post status. Use 'future' together with date to schedule."
    )
    type: Optional[Literal["post", "page"]] = Field(None, description="Content type. Defaults to 'post'.")
    tags: Optional[List[int]] = Field(None, description="Tag IDs to attach to the post.")
    categories: Optional[List[int]] = Field(None, description="Category IDs to attach to the post.")
    date: Optional[str] = Field(None, description="Publication date in ISO 8601 format.")
    force: Optional[bool] = Field(None, description="Delete permanently instead of moving to trash.")
    page: Optional[int] = Field(None, ge=1, description="Page number for pagination (default 1).")
    perPage: Optional[int] = Field(None, ge=1, le=100, description="Results per page (default 20).")
    searchType: Optional[Literal["contains", "starts_with", "ends_with"]] = Field(
        None, description="How searchValue is matched against titles and content."
    )
    searchValue: Optional[str] = Field(None, description="Text to search for.")
    tagId: Optional[int] = Field(None, description="Tag ID to filter posts by.")
    tagName: Optional[str] = Field(None, description="Tag name to filter posts by.")
    categoryId: Optional[int] = Field(None, description="Category ID to filter posts by.")
    categoryName: Optional[str] = Field(None, description="Category name to filter posts by.")
    termId: Optional[int] = Field(None, description="ID of the category or tag to update or delete.")
    name: Optional[str] = Field(None, min_length=1, description="Name of the category or tag.")
    description: Optional[str] = Field(None, description="Description of the category or tag.")
    metaKey: Optional[str] = Field(None, min_length=1, description="Post meta key.")
    metaValue: Optional[str] = Field(None, description="Post meta value.")
    mediaId: Optional[int] = Field(None, description="ID of a media item.")
    imageBase64: Optional[str] = Field(None, description="Base64 encoded image to upload.")
    imageUrl: Optional[str] = Field(None, description="URL of an image to upload.")
    fileName: Optional[str] = Field(None, description="File name for the uploaded image.")
    imageTitle: Optional[str] = Field(None, description="Title of the image.")
    caption: Optional[str] = Field(None, description="Caption of the image.")
    altText: Optional[str] = Field(None, description="Alternative text of the image.")

    ACTION_RULES: ClassVar = {
        "createPost": [AllOf(("title", "content"), "Title and content are required for creating a post or page.")],
        "editPost": [
            AllOf(("postId",), "postId is required for editing a post or page."),
            AnyOf(POST_FIELDS, "Nothing to update: provide at least one of title, content, status, tags, categories or date."),
        ],
        "deletePost": [AllOf(("postId",), "postId is required for deleting a post or page.")],
        "addCategory": [_TERM_NAME],
        "addTag": [_TERM_NAME],
        "updateCategory": [_TERM_ID, _TERM_UPDATE],
        "updateTag": [_TERM_ID, _TERM_UPDATE],
        "deleteCategory": [_TERM_ID],
        "deleteTag": [_TERM_ID],
        "getPostMeta": [_POST_ID],
        "updatePostMeta": [AllOf(("postId", "metaKey", "metaValue"), "postId, metaKey and metaValue are required for updating post meta.")],
        "searchByMeta": [AllOf(("metaKey", "metaValue"), "metaKey and metaValue are required for searching by meta.")],
        "setFeaturedImage": [
            _POST_ID,
            AnyOf(("imageBase64", "imageUrl"), "Provide imageBase64 or imageUrl for the featured image."),
        ],
        "updateImageMeta": [
            AnyOf(("postId", "mediaId"), "postId or mediaId is required for updating image metadata."),
            AnyOf(IMAGE_META_FIELDS, "Provide at least one of imageTitle, caption or altText to update."),
        ],
    }

    @field_validator("date")
    @classmethod
    def _iso_date(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            try:
                datetime.fromisoformat(value)
            except ValueError as exc:
                raise ValueError("date must be an ISO 8601 date-time") from exc
        return value


def _rendered(item: Dict[str, Any], key: str = "title") -> Any:
    value = item.get(key)
    if isinstance(value, dict):
        return value.get("rendered")
    return value


def _post_summary(post: Dict[str, Any]) -> Dict[str, Any]:
    return {"id": post.get("id"), "title": _rendered(post)}


def _term_summary(term: Dict[str, Any]) -> Dict[str, Any]:
    return {key: term.get(key) for key in ("id", "name", "slug", "count")}


def _as_list(data: Any, context: str) -> List[Dict[str, Any]]:
    if not isinstance(data, list):
        raise ToolResponseError(f"Expected a list in {context}")
    return data


def _as_dict(data: Any, context: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ToolResponseError(f"Expected an object in {context}")
    return data


class WordPressTool(ActionTool):
    """Create, edit, search and delete WordPress content."""

    TOOL_ID = "wordpress"
    request_model = WordPressRequest
    keywords = ("wordpress", "post", "page", "blog", "category", "tag", "publish", "cms")

    def __init__(
        self,
        base_url: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        *,
        session=None,
        timeout: float = 30.0,
    ):
        base_url = base_url or os.getenv("WORDPRESS_BASE_URL")
        username = username or os.getenv("WORDPRESS_USERNAME")
        password = password or os.getenv("WORDPRESS_PASSWORD")
        for env_var, value in (
            ("WORDPRESS_BASE_URL", base_url),
            ("WORDPRESS_USERNAME", username),
            ("WORDPRESS_PASSWORD", password),
        ):
            if not value:
                raise ToolCredentialsMissingError(
                    env_var, message=f"WordPress credentials or base URL are missing ({env_var})."
                )

        self.client = RestClient(base_url, session=session, timeout=timeout)
        super().__init__(PasswordTokenExchange(self.client, TOKEN_PATH, username, password))
        self.name = "WordPress"
        self.description = (
            "Interact with WordPress: create, edit, search and delete posts or pages, "
            "manage categories and tags, post meta and featured images."
        )

    # -- helpers -----------------------------------------------------------

    def _api(self, path: str) -> str:
        return f"{API_PREFIX}/{path.lstrip('/')}"

    def _collection(self, request: WordPressRequest) -> str:
        return self._api(f"{request.type or 'post'}s")

    def _find_term_id(self, taxonomy: str, label: str, term_name: str, token: str) -> int:
        """Resolve a category or tag name to the id of the first search match."""
        matches = self.client.send_json(
            "GET",
            self._api(taxonomy),
            token=token,
            params={"search": term_name},
            failure=f'Failed to fetch {label} ID for name "{term_name}"',
        )
        matches = _as_list(matches, f"{label} search")
        if not matches:
            raise ToolResponseError(f'No {label} found with name "{term_name}".')
        return require(_as_dict(matches[0], f"{label} search"), "id", context=f"{label} search")

    # -- posts -------------------------------------------------------------

    @action("createPost")
    def _create_post(self, request: WordPressRequest, context: InvocationContext) -> Dict[str, Any]:
        content_type = request.type or "post"
        payload = {
            "title": request.title,
            "content": request.content,
            "status": request.status or "draft",
            "tags": request.tags or [],
            "categories": request.categories or [],
            "date": request.date,
        }
        created = self.client.send_json(
            "POST",
            self._collection(request),
            token=context.token,
            json=payload,
            failure=f"Failed to create {content_type}",
        )
        return {
            "message": f"{content_type} created successfully",
            "id": require(created, "id", context="created post"),
            "title": require(created, "title", "rendered", context="created post"),
        }

    @action("editPost")
    def _edit_post(self, request: WordPressRequest, context: InvocationContext) -> Dict[str, Any]:
        updated = self.client.send_json(
            "POST",
            f"{self._collection(request)}/{request.postId}",
            token=context.token,
            json=request.supplied(*POST_FIELDS),
            failure="Failed to edit post",
        )
        return {
            "message": "Post updated successfully",
            "id": require(updated, "id", context="updated post"),
            "title": _rendered(updated),
        }

    @action("deletePost")
    def _delete_post(self, request: WordPressRequest, context: InvocationContext) -> Dict[str, Any]:
        params = {"force": "true"} if request.force else None
        deleted = self.client.send_json(
            "DELETE",
            f"{self._collection(request)}/{request.postId}",
            token=context.token,
            params=params,
            failure="Failed to delete post",
        )
        deleted = _as_dict(deleted, "deleted post")
        # A forced delete answers {"deleted": true, "previous": {...}}.
        previous = deleted.get("previous")
        post_id = deleted.get("id") or (previous.get("id") if isinstance(previous, dict) else None) or request.postId
        return {"message": "Post deleted successfully", "postId": post_id}

    @action("listPosts")
    def _list_posts(self, request: WordPressRequest, context: InvocationContext) -> List[Dict[str, Any]]:
        posts = self.client.send_json(
            "GET", self._collection(request), token=context.token, failure="Failed to fetch posts"
        )
        return [_post_summary(post) for post in _as_list(posts, "post list")]

    @action("listPaginatedPosts")
    def _list_paginated_posts(self, request: WordPressRequest, context: InvocationContext) -> Dict[str, Any]:
        page = request.page if request.page is not None else DEFAULT_PAGE
        per_page = request.perPage if request.perPage is not None else DEFAULT_PER_PAGE
        response = self.client.send(
            "GET",
            self._collection(request),
            token=context.token,
            params={"page": page, "per_page": per_page},
            failure="Failed to fetch paginated posts",
        )
        try:
            posts = response.json()
        except ValueError as exc:
            raise ToolResponseError("Expected a JSON list of posts") from exc
        headers = getattr(response, "headers", {}) or {}
        return {
            "page": page,
            "perPage": per_page,
            "total": _int_header(headers, "X-WP-Total"),
            "totalPages": _int_header(headers, "X-WP-TotalPages"),
            "posts": [
                {**_post_summary(post), "status": post.get("status"), "date": post.get("date")}
                for post in _as_list(posts, "post list")
            ],
        }

    @action("searchPosts")
    def _search_posts(self, request: WordPressRequest, context: InvocationContext) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {}
        if request.searchType and request.searchValue:
            if request.searchType == "contains":
                params["search"] = request.searchValue
            elif request.searchType == "starts_with":
                params["title"] = f"{request.searchValue}*"
            else:
                params["title"] = f"*{request.searchValue}"
        elif request.searchValue:
            params["search"] = request.searchValue

        tag_id = request.tagId
        if request.tagName:
            tag_id = self._find_term_id("tags", "tag", request.tagName, context.token)
        category_id = request.categoryId
        if request.categoryName:
            category_id = self._find_term_id("categories", "category", request.categoryName, context.token)

        params["status"] = "any"
        if tag_id:
            params["tags"] = tag_id
        if category_id:
            params["categories"] = category_id

        posts = self.client.send_json(
            "GET", self._collection(request), token=context.token, params=params, failure="Failed to search posts"
        )
        return [_post_summary(post) for post in _as_list(posts, "post search")]

    # -- taxonomy ----------------------------------------------------------

    def _list_terms(self, taxonomy: str, label: str, token: str) -> List[Dict[str, Any]]:
        terms = self.client.send_json("GET", self._api(taxonomy), token=token, failure=f"Failed to fetch {label}")
        return [_term_summary(term) for term in _as_list(terms, f"{label} list")]

    def _add_term(self, taxonomy: str, label: str, request: WordPressRequest, token: str) -> Dict[str, Any]:
        created = self.client.send_json(
            "POST",
            self._api(taxonomy),
            token=token,
            json=request.supplied(*TERM_FIELDS),
            failure=f"Failed to add {label.lower()}",
        )
        return {
            "message": f"{label} added successfully",
            "id": require(created, "id", context=f"created {label.lower()}"),
            "name": created.get("name"),
        }

    def _update_term(self, taxonomy: str, label: str, request: WordPressRequest, token: str) -> Dict[str, Any]:
        updated = self.client.send_json(
            "POST",
            self._api(f"{taxonomy}/{request.termId}"),
            token=token,
            json=request.supplied(*TERM_FIELDS),
            failure=f"Failed to update {label.lower()}",
        )
        updated = _as_dict(updated, f"updated {label.lower()}")
        return {"message": f"{label} updated successfully", "id": updated.get("id", request.termId), "name": updated.get("name")}

    def _delete_term(self, taxonomy: str, label: str, request: WordPressRequest, token: str) -> Dict[str, Any]:
        # Terms do not support trashing, so deletion must be forced.
        self.client.send_json(
            "DELETE",
            self._api(f"{taxonomy}/{request.termId}"),
            token=token,
            params={"force": "true"},
            failure=f"Failed to delete {label.lower()}",
        )
        return {"message": f"{label} deleted successfully", "id": request.termId}

    @action("listCategories")
    def _list_categories(self, request, context):
        return self._list_terms("categories", "categories", context.token)

    @action("listTags")
    def _list_tags(self, request, context):
        return self._list_terms("tags", "tags", context.token)

    @action("addCategory")
    def _add_category(self, request, context):
        return self._add_term("categories", "Category", request, context.token)

    @action("addTag")
    def _add_tag(self, request, context):
        return self._add_term("tags", "Tag", request, context.token)

    @action("updateCategory")
    def _update_category(self, request, context):
        return self._update_term("categories", "Category", request, context.token)

    @action("updateTag")
    def _update_tag(self, request, context):
        return self._update_term("tags", "Tag", request, context.token)

    @action("deleteCategory")
    def _delete_category(self, request, context):
        return self._delete_term("categories", "Category", request, context.token)

    @action("deleteTag")
    def _delete_tag(self, request, context):
        return self._delete_term("tags", "Tag", request, context.token)

    # -- post meta ---------------------------------------------------------

    @action("getPostMeta")
    def _get_post_meta(self, request: WordPressRequest, context: InvocationContext) -> Dict[str, Any]:
        post = self.client.send_json(
            "GET",
            f"{self._collection(request)}/{request.postId}",
            token=context.token,
            params={"context": "edit"},
            failure="Failed to fetch post meta",
        )
        post = _as_dict(post, "post")
        if "meta" not in post:
            raise ToolResponseError(f"Post {request.postId} exposes no meta fields")
        return {"postId": request.postId, "meta": post["meta"]}

    @action("updatePostMeta")
    def _update_post_meta(self, request: WordPressRequest, context: InvocationContext) -> Dict[str, Any]:
        updated = self.client.send_json(
            "POST",
            f"{self._collection(request)}/{request.postId}",
            token=context.token,
            json={"meta": {request.metaKey: request.metaValue}},
            failure="Failed to update post meta",
        )
        updated = _as_dict(updated, "updated post")
        return {
            "message": "Post meta updated successfully",
            "postId": updated.get("id", request.postId),
            "meta": {request.metaKey: request.metaValue},
        }

    @action("searchByMeta")
    def _search_by_meta(self, request: WordPressRequest, context: InvocationContext) -> List[Dict[str, Any]]:
        posts = self.client.send_json(
            "GET",
            self._collection(request),
            token=context.token,
            params={"meta_key": request.metaKey, "meta_value": request.metaValue, "status": "any"},
            failure="Failed to search posts by meta",
        )
        return [
            {**_post_summary(post), "meta": post.get("meta", {})}
            for post in _as_list(posts, "meta search")
        ]

    # -- media -------------------------------------------------------------

    def _image_bytes(self, request: WordPressRequest) -> tuple[bytes, str]:
        if request.imageBase64:
            encoded = request.imageBase64
            content_type = "image/png"
            if encoded.startswith("data:"):
                header, _, encoded = encoded.partition(",")
                content_type = header[5:].split(";")[0] or content_type
            try:
                return base64.b64decode(encoded, validate=True), content_type
            except (binascii.Error, ValueError) as exc:
                raise ToolResponseError("imageBase64 is not valid base64 data") from exc

        response = self.client.send("GET", request.imageUrl, failure="Failed to download image")
        content_type = (getattr(response, "headers", {}) or {}).get("Content-Type", "image/png")
        return response.content, content_type.split(";")[0]

    @action("setFeaturedImage")
    def _set_featured_image(self, request: WordPressRequest, context: InvocationContext) -> Dict[str, Any]:
        image, content_type = self._image_bytes(request)
        extension = content_type.split("/")[-1] or "png"
        file_name = request.fileName or f"img-{uuid.uuid4()}.{extension}"

        media = self.client.send_json(
            "POST",
            self._api("media"),
            token=context.token,
            data=image,
            headers={
                "Content-Type": content_type,
                "Content-Disposition": f'attachment; filename="{file_name}"',
            },
            failure="Failed to upload image",
        )
        media_id = require(media, "id", context="uploaded media")
        logger.info("wordpress_media_uploaded", media_id=media_id, file_name=file_name)

        image_meta = self._image_meta_payload(request)
        if image_meta:
            self.client.send_json(
                "POST",
                self._api(f"media/{media_id}"),
                token=context.token,
                json=image_meta,
                failure="Failed to update image metadata",
            )

        self.client.send_json(
            "POST",
            f"{self._collection(request)}/{request.postId}",
            token=context.token,
            json={"featured_media": media_id},
            failure="Failed to set featured image",
        )
        return {
            "message": "Featured image set successfully",
            "postId": request.postId,
            "mediaId": media_id,
            "image_url": media.get("source_url"),
        }

    @staticmethod
    def _image_meta_payload(request: WordPressRequest) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if request.imageTitle is not None:
            payload["title"] = request.imageTitle
        if request.caption is not None:
            payload["caption"] = request.caption
        if request.altText is not None:
            payload["alt_text"] = request.altText
        return payload

    @action("updateImageMeta")
    def _update_image_meta(self, request: WordPressRequest, context: InvocationContext) -> Dict[str, Any]:
        media_id = request.mediaId
        if media_id is None:
            post = self.client.send_json(
                "GET",
                f"{self._collection(request)}/{request.postId}",
                token=context.token,
                failure="Failed to fetch post",
            )
            post = _as_dict(post, "post")
            media_id = post.get("featured_media")
            if not media_id:
                raise ToolResponseError(f"Post {request.postId} has no featured image.")

        self.client.send_json(
            "POST",
            self._api(f"media/{media_id}"),
            token=context.token,
            json=self._image_meta_payload(request),
            failure="Failed to update image metadata",
        )
        return {"message": "Image metadata updated successfully", "mediaId": media_id}


def _int_header(headers: Any, name: str) -> Optional[int]:
    value = headers.get(name)
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None
