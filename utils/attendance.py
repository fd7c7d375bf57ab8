"""
utils/attendance.py
-----------------
Per-user Amavasya attendance: Present / Absent for each event and the
"continuous present" streak counted back from the most recent event.

An attendance record (amavasya_user_locations document) existing for an
(amavasyaId, userId) pair is the only signal of presence.
"""

PRESENT = "Present"
ABSENT = "Absent"


def compute_attendance(events, records):
    """
    events  -- Amavasya documents sorted by startDate, newest first
    records -- the user's attendance records; each may carry a resolved
               "locationName" alongside its "amavasyaId" and "note"

    Returns a dict with totalAmavasya, present, absent,
    continuousPresentCount and items (oldest -> newest).
    """
    # duplicates for the same event collapse, last one wins
    by_event = {}
    for record in records:
        by_event[str(record.get("amavasyaId"))] = record

    items = []
    present = 0
    streak = 0
    streak_broken = False

    for event in events:
        record = by_event.get(str(event.get("_id")))
        status = PRESENT if record else ABSENT

        if record:
            present += 1
            if not streak_broken:
                streak += 1
        else:
            streak_broken = True

        items.append({
            "amavasyaId": event.get("_id"),
            "month": event.get("month"),
            "year": event.get("year"),
            "startDate": event.get("startDate"),
            "endDate": event.get("endDate"),
            "status": status,
            "location": record.get("locationName") if record else None,
            "note": record.get("note") if record else None,
        })

    items.reverse()

    return {
        "totalAmavasya": len(items),
        "present": present,
        "absent": len(items) - present,
        "continuousPresentCount": streak,
        "items": items,
    }
