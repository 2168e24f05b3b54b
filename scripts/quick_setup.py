#!/usr/bin/env python
"""
Setup rápido para desenvolvimento local.

Este script:
1. Configura Django settings
2. Executa migrations
3. Cria os grupos de papéis (superadmin, admin, manager, agent)
4. Cadastra o catálogo inicial de políticas de SLA (SLA_DEFAULT_POLICIES)
5. Cria tickets de exemplo (opcional)

Uso:
    python scripts/quick_setup.py
    python scripts/quick_setup.py --with-sample-data
    python scripts/quick_setup.py --check-only
"""

import os
import sys
import argparse

# Raiz do projeto no path (pacote src)
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def setup_django():
    """Configura Django para uso standalone."""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'src.config.settings')

    import django
    django.setup()


def run_migrations():
    from django.core.management import call_command

    print("📦 Executando migrations...")
    call_command('migrate', verbosity=1)
    print("✅ Migrations concluídas!")


def create_groups():
    """Cria um Group por papel configurado em HELPDESK_ROLE_PERMISSIONS."""
    from django.conf import settings
    from django.contrib.auth.models import Group

    print("👥 Criando grupos de papéis...")
    for papel in settings.HELPDESK_ROLE_PERMISSIONS:
        _, criado = Group.objects.get_or_create(name=papel)
        print(f"   {'✓' if criado else '='} {papel}")


def seed_policies():
    """
    Cadastra as políticas padrão.

    Prioridades que já têm política ativa são mantidas como estão.
    """
    from django.conf import settings

    from src.core.sla.entities import SLAPolicyEntity
    from src.core.tickets.entities import TicketPriority
    from src.adapters.django_app.tickets.repositories import DjangoSLAPolicyRepository

    repo = DjangoSLAPolicyRepository()

    print("⏱️  Cadastrando políticas de SLA...")
    for dados in settings.SLA_DEFAULT_POLICIES:
        prioridade = TicketPriority.from_string(dados['prioridade'])

        if repo.get_ativa_por_prioridade(prioridade):
            print(f"   = {prioridade.value}: política ativa já existe")
            continue

        politica = SLAPolicyEntity.criar(
            nome=dados['nome'],
            prioridade=prioridade,
            horas_resposta=dados['horas_resposta'],
            horas_resolucao=dados['horas_resolucao'],
        )
        repo.save(politica)
        print(
            f"   ✓ {politica.nome} "
            f"({politica.horas_resposta}h / {politica.horas_resolucao}h)"
        )


def create_sample_data():
    """Cria tickets de exemplo pelo caso de uso (vínculo de SLA incluso)."""
    from src.config.container import get_container
    from src.core.tickets.dtos import CriarTicketInputDTO

    service = get_container().criar_ticket_service()

    sample_tickets = [
        CriarTicketInputDTO(
            titulo='Sistema fora do ar',
            descricao='O sistema está inacessível para todos os usuários. Erro 503 em todas as páginas.',
            criador_id='1',
            prioridade='urgent',
            categoria='Infraestrutura',
        ),
        CriarTicketInputDTO(
            titulo='Bug no login com Google',
            descricao='Usuários não conseguem fazer login usando conta Google.',
            criador_id='1',
            prioridade='high',
            categoria='Autenticação',
        ),
        CriarTicketInputDTO(
            titulo='Relatório exportando dados incorretos',
            descricao='O relatório de vendas mostra valores negativos em algumas colunas.',
            criador_id='1',
            prioridade='medium',
            categoria='Relatórios',
        ),
        CriarTicketInputDTO(
            titulo='Sugestão de modo escuro',
            descricao='Seria interessante ter um modo escuro na aplicação.',
            criador_id='1',
            prioridade='low',
            categoria='UX/UI',
        ),
    ]

    print("📝 Criando tickets de exemplo...")
    for dto in sample_tickets:
        output = service.execute(dto)
        prazo = output.sla_prazo or 'sem SLA'
        print(f"   ✓ [{output.prioridade}] {output.titulo[:40]} (prazo: {prazo})")

    print(f"✅ {len(sample_tickets)} tickets criados!")


def check_connection():
    """Verifica conexão com o banco."""
    from src.adapters.django_app.shared.database import verificar_conexao

    print("🔍 Verificando conexão com o banco...")

    resultado = verificar_conexao()
    if resultado['healthy']:
        print(f"✅ Conexão OK! ({resultado['engine']})")
        return True

    print(f"❌ Erro de conexão: {resultado['error']}")
    return False


def show_info():
    """Mostra informações do setup."""
    from django.conf import settings

    print("\n" + "=" * 60)
    print("📊 Informações do Setup")
    print("=" * 60)
    print(f"  Database Engine: {settings.DATABASES['default']['ENGINE']}")
    print(f"  Database Name: {settings.DATABASES['default']['NAME']}")
    print(f"  Event Publisher: {settings.EVENT_PUBLISHER_MODE}")
    print(f"  E-mail: {settings.NOTIFICATION_EMAIL_MODE}")
    print(f"  Varredura de SLA a cada {settings.SLA_SWEEP_INTERVAL_SECONDS}s")
    print("=" * 60)
    print("\n🚀 Próximos passos:")
    print("   1. python manage.py createsuperuser")
    print("   2. python manage.py runserver")
    print("   3. celery -A src.config.celery worker -Q default,events,notifications,sla -l INFO")
    print("   4. celery -A src.config.celery beat -l INFO")
    print("\n")


def main():
    parser = argparse.ArgumentParser(description='Setup rápido para desenvolvimento')
    parser.add_argument(
        '--with-sample-data',
        action='store_true',
        help='Criar tickets de exemplo'
    )
    parser.add_argument(
        '--check-only',
        action='store_true',
        help='Apenas verificar conexão'
    )

    args = parser.parse_args()

    print("\n" + "=" * 60)
    print("🔧 Helpdesk SLA - Quick Setup")
    print("=" * 60 + "\n")

    setup_django()

    if args.check_only:
        check_connection()
        return

    if not check_connection():
        print("\n⚠️  Certifique-se de que o banco de dados está rodando.")
        print("   Sem DATABASE_URL/DATABASE_NAME o projeto usa SQLite local.")
        return

    run_migrations()
    create_groups()
    seed_policies()

    if args.with_sample_data:
        create_sample_data()

    show_info()


if __name__ == '__main__':
    main()
