from typing import List

from .common import ObjectIdStr, RequestSchema


class ActivityPermissionItem(RequestSchema):
    activityId: ObjectIdStr
    permissionIds: List[ObjectIdStr] = []


class ActivityPermissionAssignSchema(RequestSchema):
    roleId: ObjectIdStr
    activities: List[ActivityPermissionItem]
