import pytest

from pharmastock.extensions import db
from pharmastock.models import Distribution, Service
from pharmastock.services.errors import NotFoundError, ValidationError
from pharmastock.services.hospital_services import create_service, delete_service, list_services
from pharmastock.services.stock_mutation import distribute_stock


class TestHospitalServices:

    def test_create_and_list_sorted_by_name(self, db_session):
        create_service('  Urgences ')
        create_service('Cardiologie')
        assert [service.name for service in list_services()] == ['Cardiologie', 'Urgences']

    def test_blank_name_is_rejected(self, db_session):
        with pytest.raises(ValidationError) as exc_info:
            create_service('   ')
        assert exc_info.value.field == 'name'

    def test_duplicate_name_is_rejected_case_insensitively(self, db_session):
        create_service('Pédiatrie')
        with pytest.raises(ValidationError) as exc_info:
            create_service('pédiatrie')
        assert 'already exists' in exc_info.value.message

    def test_delete_unknown_service(self, db_session):
        with pytest.raises(NotFoundError):
            delete_service(404)
        with pytest.raises(NotFoundError):
            delete_service('abc')

    def test_deleting_a_service_keeps_its_distributions(self, db_session, persist_lot):
        service = create_service('Maternité')
        service_id = service.id
        entry = distribute_stock(quantity=2, service_id=service_id, lot_id=persist_lot())

        delete_service(service_id)

        assert db.session.get(Service, service_id) is None
        stored = db.session.get(Distribution, entry.id)
        assert stored.service_id == service_id
        assert stored.service_name == 'Maternité'
