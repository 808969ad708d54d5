from __future__ import annotations

import logging

from flask import Blueprint, request, jsonify, abort, g, current_app
from sqlalchemy import func

from models.video import Video
from models.schemas.video import VideoCreateSchema, VideoOutSchema
from services.exceptions import SessionValidationError, UpstreamError
from services.media_host import MediaUploadError
from utils.decorators import jwt_required
from utils.pagination import paginate

bp = Blueprint("videos", __name__)

logger = logging.getLogger(__name__)

# Schemas
video_create_schema = VideoCreateSchema()
video_out_schema = VideoOutSchema()
videos_out_schema = VideoOutSchema(many=True)

# Keyset order: newest first, id breaks ties
PAGE_COLUMNS = (Video.created_at, Video.id)


def _storage():
    return current_app.extensions["storage"]


def _file(field: str):
    upload = request.files.get(field)
    if upload is None or not upload.filename:
        raise SessionValidationError(f"{field} file is required")
    return upload


def _upload(upload, field: str) -> str:
    try:
        return current_app.extensions["media_host"].upload(upload.stream, upload.filename).url
    except MediaUploadError as exc:
        logger.warning("%s upload failed: %s", field, exc)
        raise UpstreamError(f"{field} upload failed") from exc


@bp.post("/videos")
@jwt_required()
def publish_video():
    """
    Publish a video
    ---
    tags:
      - Videos
    security:
      - Bearer: []
    consumes:
      - multipart/form-data
    parameters:
      - { in: formData, name: videoFile, type: file, required: true }
      - { in: formData, name: thumbnail, type: file, required: true }
      - { in: formData, name: title, type: string, required: true }
      - { in: formData, name: description, type: string, required: true }
      - { in: formData, name: duration, type: number, required: true, description: "seconds" }
      - { in: formData, name: isPublished, type: boolean, default: true }
    responses:
      201:
        description: Created
      400:
        description: Validation error
      502:
        description: Media upload failed
    """
    data = video_create_schema.load(request.form.to_dict())

    video_file, thumbnail = _file("videoFile"), _file("thumbnail")
    video_url = _upload(video_file, "videoFile")
    thumbnail_url = _upload(thumbnail, "thumbnail")

    v = Video(
        owner_id=g.current_user.id,
        video_file=video_url,
        thumbnail=thumbnail_url,
        title=data["title"].strip(),
        description=data["description"].strip(),
        duration=data["duration"],
        is_published=data.get("is_published", True),
    )
    storage = _storage()
    storage.new(v)
    storage.save()

    return jsonify({"data": video_out_schema.dump(v)}), 201


@bp.get("/videos")
def list_videos():
    """
    List published videos, newest first, with cursor pagination
    ---
    tags:
      - Videos
    parameters:
      - in: query
        name: cursor
        type: string
        description: "nextCursor from the previous page"
      - in: query
        name: limit
        type: integer
        default: 20
      - in: query
        name: owner
        type: string
        description: "Only videos by this user id"
      - in: query
        name: q
        type: string
        description: "Case-insensitive title search"
    responses:
      200:
        description: OK
      400:
        description: Bad cursor or limit
    """
    session = _storage().get_session()
    query = session.query(Video).filter(Video.is_published.is_(True))

    owner = request.args.get("owner")
    if owner:
        query = query.filter(Video.owner_id == owner)

    q = request.args.get("q")
    if q:
        term = q.strip().lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        query = query.filter(func.lower(Video.title).like(f"%{term}%", escape="\\"))

    page = paginate(
        query,
        PAGE_COLUMNS,
        cursor=request.args.get("cursor"),
        limit=request.args.get("limit"),
    )
    return jsonify(
        {
            "data": videos_out_schema.dump(page.items),
            "meta": {"nextCursor": page.next_cursor, "count": len(page.items)},
        }
    )


@bp.get("/videos/<video_id>")
def get_video(video_id: str):
    """
    Get one published video
    ---
    tags:
      - Videos
    parameters:
      - in: path
        name: video_id
        type: string
        required: true
    responses:
      200: { description: OK }
      404: { description: Not found }
    """
    v = _storage().get(Video, video_id)
    if v is None or not v.is_published:
        abort(404, description="Video not found")
    return jsonify({"data": video_out_schema.dump(v)})
