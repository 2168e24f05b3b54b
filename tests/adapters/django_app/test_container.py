"""
Testes do Container de DI.
"""

from django.test import override_settings

from src.adapters.django_app.events.publishers import CeleryEventPublisher, LoggingEventPublisher
from src.adapters.django_app.notifications.channels import CeleryEmailChannel, DjangoEmailChannel
from src.config.container import get_container, reset_container
from src.core.sla.use_cases import VerificarSLAService


class TestContainer:

    def test_get_container_singleton(self):
        """get_container deve retornar mesma instância."""
        assert get_container() is get_container()

    def test_reset_container(self):
        """reset_container deve criar nova instância."""
        container1 = get_container()
        reset_container()
        assert get_container() is not container1

    def test_registro_e_compartilhado(self):
        container = get_container()
        assert container.sla_registry() is container.sla_registry()
        assert container.unit_of_work() is not container.unit_of_work()

    def test_varredura_usa_configuracao(self):
        service = get_container().verificar_sla_service()

        assert isinstance(service, VerificarSLAService)
        assert service.max_workers == 1
        assert service.escalar_service.max_tentativas == 3
        assert service.sinal_parada is get_container().sinal_parada_sla()

    def test_modo_sync(self):
        container = get_container()
        assert isinstance(container.event_publisher(), LoggingEventPublisher)
        assert isinstance(container.canal_email(), DjangoEmailChannel)

    @override_settings(EVENT_PUBLISHER_MODE='celery', NOTIFICATION_EMAIL_MODE='celery')
    def test_modo_celery(self):
        reset_container()
        container = get_container()
        assert isinstance(container.event_publisher(), CeleryEventPublisher)
        assert isinstance(container.canal_email(), CeleryEmailChannel)
