from datetime import datetime, timedelta

FUTURE = "FUTURE"
CURRENT = "CURRENT"
PAST = "PAST"

STATUS_ORDER = {FUTURE: 1, CURRENT: 2, PAST: 3}


def timeline_window(now):
    """First instant of last month .. last instant of next month."""
    if now.month == 1:
        start = datetime(now.year - 1, 12, 1)
    else:
        start = datetime(now.year, now.month - 1, 1)

    # first day of the month after next, minus one microsecond
    month_after_next = now.month + 2
    year = now.year + (month_after_next - 1) // 12
    month = (month_after_next - 1) % 12 + 1
    end = datetime(year, month, 1) - timedelta(microseconds=1)
    return start, end


def month_status(start_date, now):
    # only the calendar month matters, not the day
    if (start_date.year, start_date.month) == (now.year, now.month):
        return CURRENT
    if (start_date.year, start_date.month) > (now.year, now.month):
        return FUTURE
    return PAST


def bucket_amavasya_timeline(events, now):
    """Tag each event FUTURE / CURRENT / PAST and order FUTURE first."""
    items = [dict(event, timeStatus=month_status(event["startDate"], now)) for event in events]
    items.sort(key=lambda item: (STATUS_ORDER[item["timeStatus"]], item["startDate"]))
    return items
