from flask_login import login_required

from . import hospital_services_bp
from ...services.hospital_services import create_service, delete_service, list_services
from ...utils.api_responses import APIResponse
from ...utils.error_messages import SuccessMessages


@hospital_services_bp.route('', methods=['GET'])
@login_required
def index():
    return APIResponse.success({'services': [service.to_dict() for service in list_services()]})


@hospital_services_bp.route('', methods=['POST'])
@login_required
def create():
    data = APIResponse.handle_request_content()
    service = create_service(data.get('name'))
    return APIResponse.success(
        service.to_dict(),
        message=SuccessMessages.SERVICE_CREATED.format(name=service.name),
        status_code=201,
    )


@hospital_services_bp.route('/<int:service_id>', methods=['DELETE'])
@login_required
def delete(service_id):
    delete_service(service_id)
    return APIResponse.success(message=SuccessMessages.SERVICE_DELETED)
