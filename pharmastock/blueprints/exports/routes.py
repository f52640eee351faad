from flask import Response, current_app, request
from flask_login import login_required

from . import exports_bp
from ...services.exports import lots_to_csv, lots_to_pdf
from ...services.inventory_view import lots_for_request
from ...services.status_classifier import ClassificationPolicy
from ...utils.timezone_utils import TimezoneUtils


def _filename(today, extension: str) -> str:
    return f"inventory-{today.isoformat()}.{extension}"


@exports_bp.route('/inventory.csv', methods=['GET'])
@login_required
def inventory_csv():
    today = TimezoneUtils.today()
    lots = lots_for_request(request.args, current_app.config, today)
    body = lots_to_csv(lots, today, ClassificationPolicy.from_config(current_app.config))
    return Response(
        body,
        mimetype='text/csv; charset=utf-8',
        headers={'Content-Disposition': f'attachment; filename="{_filename(today, "csv")}"'},
    )


@exports_bp.route('/inventory.pdf', methods=['GET'])
@login_required
def inventory_pdf():
    today = TimezoneUtils.today()
    lots = lots_for_request(request.args, current_app.config, today)
    pdf = lots_to_pdf(
        lots,
        today,
        title='Pharmacy inventory',
        policy=ClassificationPolicy.from_config(current_app.config),
        generated_at=TimezoneUtils.now().strftime('%Y-%m-%d %H:%M'),
    )
    return Response(
        pdf,
        mimetype='application/pdf',
        headers={'Content-Disposition': f'attachment; filename="{_filename(today, "pdf")}"'},
    )
