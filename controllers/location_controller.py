from flask import Blueprint, request, g
from datetime import datetime
from pymongo import ReturnDocument

from models.location import Location
from models.activity import LOCATIONS
from models.permission import VIEW_LIST, VIEW_DETAILS, CREATE, EDIT, DELETE
from schemas import LocationCreateSchema, LocationUpdateSchema
from utils.auth import authenticate_user, authorize_user, current_user_id
from utils.helpers import to_object_id
from utils.pagination import paginate, regex, parse_bool
from utils.responses import ApiError, response_message, send_success
from utils.validation import validate_schema

locations_bp = Blueprint("locations", __name__, url_prefix="/api/v1/location")


@locations_bp.route("", methods=["POST"])
@authenticate_user
@authorize_user(CREATE, LOCATIONS)
@validate_schema(LocationCreateSchema)
def add_location():
    location = Location(createdBy=current_user_id(), **g.body).to_dict()
    Location.collection().insert_one(location)
    return send_success(response_message.created("Location"), 201, location)


@locations_bp.route("", methods=["GET"])
@authenticate_user
@authorize_user(VIEW_LIST, LOCATIONS)
def view_locations():
    query = {}
    is_active = parse_bool(request.args.get("isActive"))
    if is_active is not None:
        query["isActive"] = is_active
    if request.args.get("q"):
        q = request.args["q"]
        query["$or"] = [{"name": regex(q)}, {"description": regex(q)}]

    payload = paginate(Location.collection(), query, request.args, sort=[("createdAt", -1)], default_limit=50)
    return send_success("Locations fetched successfully", 200, payload)


@locations_bp.route("/<location_id>", methods=["GET"])
@authenticate_user
@authorize_user(VIEW_DETAILS, LOCATIONS)
def get_location(location_id):
    location = Location.collection().find_one({"_id": to_object_id(location_id)})
    if not location:
        raise ApiError(404, response_message.not_found("Location"))
    return send_success(response_message.fetched("Location"), 200, location)


@locations_bp.route("/<location_id>", methods=["PUT"])
@authenticate_user
@authorize_user(EDIT, LOCATIONS)
@validate_schema(LocationUpdateSchema, partial=True)
def edit_location(location_id):
    location = Location.collection().find_one_and_update(
        {"_id": to_object_id(location_id)},
        {"$set": {**g.body, "updatedBy": current_user_id(), "updatedAt": datetime.utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    if not location:
        raise ApiError(404, response_message.not_found("Location"))
    return send_success(response_message.updated("Location"), 200, location)


@locations_bp.route("/<location_id>", methods=["DELETE"])
@authenticate_user
@authorize_user(DELETE, LOCATIONS)
def delete_location(location_id):
    result = Location.collection().delete_one({"_id": to_object_id(location_id)})
    if result.deleted_count == 0:
        raise ApiError(404, response_message.not_found("Location"))
    return send_success(response_message.deleted("Location"), 200, None)
