from flask import Blueprint, request, g
from datetime import datetime
from pymongo import ReturnDocument

from models.amavasya import Amavasya
from models.activity import ATTENDANCE
from models.permission import CREATE, EDIT, DELETE
from schemas import AmavasyaCreateSchema, AmavasyaUpdateSchema
from utils.auth import authenticate_user, authorize_user, current_user_id
from utils.helpers import to_object_id
from utils.pagination import single_page
from utils.responses import ApiError, response_message, send_success
from utils.validation import validate_schema

amavasya_bp = Blueprint("amavasya", __name__, url_prefix="/api/v1/amavasya")


def _check_dates(start_date, end_date):
    if start_date and end_date and end_date < start_date:
        raise ApiError(400, "endDate must not be before startDate")


@amavasya_bp.route("", methods=["POST"])
@authenticate_user
@authorize_user(CREATE, ATTENDANCE)
@validate_schema(AmavasyaCreateSchema)
def add_amavasya():
    _check_dates(g.body["startDate"], g.body.get("endDate"))

    amavasya = Amavasya(createdBy=current_user_id(), **g.body).to_dict()
    Amavasya.collection().insert_one(amavasya)
    return send_success(response_message.created("Amavasya"), 201, amavasya)


# All events, oldest first (small collection: one per month)
@amavasya_bp.route("", methods=["GET"])
@authenticate_user
def view_amavasya():
    query = {}
    if request.args.get("year", "").isdigit():
        query["year"] = int(request.args["year"])

    items = list(Amavasya.collection().find(query).sort("startDate", 1))
    return send_success("Amavasya list fetched", 200, single_page(items))


@amavasya_bp.route("/<amavasya_id>", methods=["GET"])
@authenticate_user
def get_amavasya(amavasya_id):
    amavasya = Amavasya.collection().find_one({"_id": to_object_id(amavasya_id)})
    if not amavasya:
        raise ApiError(404, response_message.not_found("Amavasya"))
    return send_success(response_message.fetched("Amavasya"), 200, amavasya)


@amavasya_bp.route("/<amavasya_id>", methods=["PUT"])
@authenticate_user
@authorize_user(EDIT, ATTENDANCE)
@validate_schema(AmavasyaUpdateSchema, partial=True)
def edit_amavasya(amavasya_id):
    oid = to_object_id(amavasya_id)
    current = Amavasya.collection().find_one({"_id": oid})
    if not current:
        raise ApiError(404, response_message.not_found("Amavasya"))

    _check_dates(g.body.get("startDate", current.get("startDate")), g.body.get("endDate", current.get("endDate")))

    amavasya = Amavasya.collection().find_one_and_update(
        {"_id": oid},
        {"$set": {**g.body, "updatedBy": current_user_id(), "updatedAt": datetime.utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    return send_success(response_message.updated("Amavasya"), 200, amavasya)


@amavasya_bp.route("/<amavasya_id>", methods=["DELETE"])
@authenticate_user
@authorize_user(DELETE, ATTENDANCE)
def delete_amavasya(amavasya_id):
    result = Amavasya.collection().delete_one({"_id": to_object_id(amavasya_id)})
    if result.deleted_count == 0:
        raise ApiError(404, response_message.not_found("Amavasya"))
    return send_success(response_message.deleted("Amavasya"), 200, None)
