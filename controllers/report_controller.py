from flask import Blueprint, request, send_file
import io, csv
from openpyxl import Workbook
from reportlab.pdfgen import canvas
from reportlab.lib.pagesizes import A4

from controllers.amavasya_user_location_controller import build_user_attendance
from models.activity import REPORTS
from models.permission import DOWNLOAD
from utils.auth import authenticate_user, authorize_user
from utils.responses import ApiError

report_bp = Blueprint("reports", __name__, url_prefix="/api/v1/amavasyaUserLocation")

HEADERS = ["Month", "Year", "Start Date", "Status", "Location", "Note"]
XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _rows(items):
    for item in items:
        start = item.get("startDate")
        yield [
            item.get("month") or "",
            item.get("year") or "",
            start.strftime("%Y-%m-%d") if start else "",
            item.get("status"),
            item.get("location") or "",
            item.get("note") or "",
        ]


def _file_name(report, extension):
    name = (report["user"].get("userName") or "sevak").replace(" ", "_")
    return f"attendance_{name}.{extension}"


# ---------------- CSV ----------------
def export_csv(report):
    si = io.StringIO()
    cw = csv.writer(si)
    cw.writerow(HEADERS)
    for row in _rows(report["items"]):
        cw.writerow(row)
    cw.writerow([])
    cw.writerow(["Total", report["totalAmavasya"], "Present", report["present"],
                 "Absent", report["absent"]])
    cw.writerow(["Continuous Present", report["continuousPresentCount"]])

    output = io.BytesIO()
    output.write(si.getvalue().encode("utf-8"))
    output.seek(0)
    return send_file(output, mimetype="text/csv", as_attachment=True,
                     download_name=_file_name(report, "csv"))


# ---------------- Excel ----------------
def export_excel(report):
    wb = Workbook()
    ws = wb.active
    ws.title = "Attendance"
    ws.append(HEADERS)
    for row in _rows(report["items"]):
        ws.append(row)

    summary = wb.create_sheet("Summary")
    summary.append(["Sevak", report["user"].get("userName")])
    summary.append(["Total Amavasya", report["totalAmavasya"]])
    summary.append(["Present", report["present"]])
    summary.append(["Absent", report["absent"]])
    summary.append(["Continuous Present", report["continuousPresentCount"]])

    output = io.BytesIO()
    wb.save(output)
    output.seek(0)
    return send_file(output, mimetype=XLSX_MIMETYPE, as_attachment=True,
                     download_name=_file_name(report, "xlsx"))


# ---------------- PDF ----------------
def export_pdf(report):
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    width, height = A4
    y = height - 50
    c.setFont("Helvetica-Bold", 14)
    c.drawString(50, y, "Amavasya Attendance Report")
    y -= 30
    c.setFont("Helvetica", 12)
    c.drawString(50, y, f"Sevak: {report['user'].get('userName', '')}")
    c.drawString(300, y, f"Continuous Present: {report['continuousPresentCount']}")
    y -= 20
    c.drawString(50, y, f"Total: {report['totalAmavasya']}")
    c.drawString(200, y, f"Present: {report['present']}")
    c.drawString(350, y, f"Absent: {report['absent']}")
    y -= 30

    columns = [50, 130, 180, 270, 340, 460]
    for x, title in zip(columns, HEADERS):
        c.drawString(x, y, title)
    y -= 20

    for row in _rows(report["items"]):
        if y < 50:
            c.showPage()
            y = height - 50
        for x, value in zip(columns, row):
            c.drawString(x, y, str(value))
        y -= 20

    c.save()
    buffer.seek(0)
    return send_file(buffer, mimetype="application/pdf", as_attachment=True,
                     download_name=_file_name(report, "pdf"))


EXPORTERS = {"csv": export_csv, "xlsx": export_excel, "pdf": export_pdf}


@report_bp.route("/userAttendance/<user_id>/export", methods=["GET"])
@authenticate_user
@authorize_user(DOWNLOAD, REPORTS)
def export_user_attendance(user_id):
    fmt = (request.args.get("format") or "csv").lower()
    exporter = EXPORTERS.get(fmt)
    if exporter is None:
        raise ApiError(400, "format must be one of csv, xlsx, pdf")

    year = request.args.get("year")
    if year and not year.isdigit():
        raise ApiError(400, "year must be a number")

    return exporter(build_user_attendance(user_id, year))
