"""Sample catalog, accounts, coupons and access codes for development.

Loaded into the in-memory repositories at startup (and by the test
fixtures).  Never applied to a Postgres database.
"""

from __future__ import annotations

import datetime
from decimal import Decimal
from functools import lru_cache

from inspira.models.access_code import AccessCode
from inspira.models.coupon import Coupon
from inspira.models.course import Attachment, Course, Lesson, Module, Question, Quiz
from inspira.models.enrollment import Enrollment
from inspira.models.user import ROLE_ADMIN, ROLE_STUDENT, User
from inspira.repos.registry import Repos
from inspira.services import auth_service

_DAY = 24 * 60 * 60

ADMIN_EMAIL = "admin@inspira.com"
ADMIN_PASSWORD = "admin123"
STUDENT_EMAIL = "aluno@inspira.com"
STUDENT_PASSWORD = "aluno123"


@lru_cache(maxsize=None)
def _hash(password: str) -> str:
    # One hash per password per process.
    return auth_service.hash_password(password)


def sample_users() -> list[User]:
    return [
        User(
            id="user-1",
            name="Admin Programador",
            email=ADMIN_EMAIL,
            password_hash=_hash(ADMIN_PASSWORD),
            roles=(ROLE_ADMIN,),
            phone="11987654321",
        ),
        User(
            id="user-2",
            name="Aluno Exemplo",
            email=STUDENT_EMAIL,
            password_hash=_hash(STUDENT_PASSWORD),
            roles=(ROLE_STUDENT,),
            phone="11912345678",
        ),
        User(
            id="user-3",
            name="Maria Silva",
            email="maria@email.com",
            password_hash=_hash("password"),
            roles=(ROLE_STUDENT,),
            is_ct_student=True,
        ),
        User(
            id="user-4",
            name="João Santos",
            email="joao@email.com",
            password_hash=_hash("password"),
            roles=(ROLE_STUDENT,),
        ),
    ]


def sample_courses() -> list[Course]:
    html_quiz = Quiz(
        questions=(
            Question(
                id="q-1-1-3-1",
                text="Qual tag define o título principal de uma página?",
                options=("<p>", "<h1>", "<title-main>", "<header>"),
                correct_option_index=1,
            ),
            Question(
                id="q-1-1-3-2",
                text="Qual propriedade CSS altera a cor do texto?",
                options=("background", "font-color", "color"),
                correct_option_index=2,
            ),
        )
    )
    return [
        Course(
            id="course-1",
            title="Desenvolvimento Web Completo 2024",
            description=(
                "Aprenda a criar aplicações web modernas do zero com as "
                "tecnologias mais requisitadas do mercado."
            ),
            price=Decimal("499.90"),
            image_url="https://picsum.photos/seed/webdev/600/400",
            modules=(
                Module(
                    id="mod-1-1",
                    title="Módulo 1: Fundamentos do HTML5 e CSS3",
                    lessons=(
                        Lesson(
                            id="les-1-1-1",
                            title="Introdução ao HTML",
                            content="<h1>Bem-vindo ao HTML!</h1><p>Este é o conteúdo da aula.</p>",
                            attachments=(
                                Attachment(name="Código Fonte da Aula.zip", url="#"),
                            ),
                        ),
                        Lesson(
                            id="les-1-1-2",
                            title="Estilizando com CSS",
                            content="<h1>Estilizando com CSS</h1><p>Seletores e propriedades.</p>",
                            video_url="https://www.youtube.com/watch?v=O_9u1P5YjVc",
                        ),
                        Lesson(
                            id="les-1-1-3",
                            title="Quiz: HTML e CSS",
                            content="<p>Teste seus conhecimentos.</p>",
                            quiz=html_quiz,
                        ),
                    ),
                ),
                Module(
                    id="mod-1-2",
                    title="Módulo 2: JavaScript Moderno (ES6+)",
                    lessons=(
                        Lesson(
                            id="les-1-2-1",
                            title="Variáveis e Tipos de Dados",
                            content="<h1>JavaScript Moderno</h1><p>let, const, arrow functions.</p>",
                        ),
                    ),
                ),
            ),
        ),
        Course(
            id="course-2",
            title="React.js: Do Básico ao Avançado",
            description=(
                "Domine a biblioteca frontend mais popular do mundo e crie "
                "interfaces de usuário reativas e poderosas."
            ),
            price=Decimal("599.90"),
            image_url="https://picsum.photos/seed/react/600/400",
            modules=(
                Module(
                    id="mod-2-1",
                    title="Módulo 1: Introdução ao React",
                    lessons=(
                        Lesson(
                            id="les-2-1-1",
                            title="O que é React?",
                            content="<h1>O que é React?</h1><p>Entendendo a biblioteca.</p>",
                        ),
                        Lesson(
                            id="les-2-1-2",
                            title="Componentes e Props",
                            content="<h1>Componentes</h1><p>A base de tudo.</p>",
                        ),
                    ),
                ),
            ),
        ),
        Course(
            id="course-3",
            title="Design de UI/UX para Desenvolvedores",
            description=(
                "Aprenda os princípios de design para criar interfaces bonitas, "
                "funcionais e que encantam os usuários."
            ),
            price=Decimal("349.90"),
            image_url="https://picsum.photos/seed/uiux/600/400",
        ),
    ]


def sample_coupons(now: int) -> list[Coupon]:
    return [
        Coupon(
            id="coupon-1",
            code="PROMO10",
            discount_percentage=10,
            expires_at=now + 10 * _DAY,
        ),
        Coupon(
            id="coupon-2",
            code="REACT20",
            discount_percentage=20,
            expires_at=now + 5 * _DAY,
            course_id="course-2",
        ),
        Coupon(
            id="coupon-3",
            code="EXPIRED50",
            discount_percentage=50,
            expires_at=now - _DAY,
        ),
    ]


def sample_access_codes() -> list[AccessCode]:
    return [
        AccessCode(id="code-1", code="123456"),
        AccessCode(id="code-2", code="654321", is_used=True, used_by_user_id="user-3"),
        AccessCode(id="code-3", code="112233"),
        AccessCode(id="code-4", code="445566"),
    ]


async def seed_sample_data(repos: Repos, *, now: int | None = None) -> None:
    """Populate empty repositories; a no-op when users already exist."""
    if await repos.users.get_by_id("user-1") is not None:
        return
    if now is None:
        now = int(datetime.datetime.now(datetime.UTC).timestamp())

    for user in sample_users():
        await repos.users.add(user)
    for course in sample_courses():
        await repos.courses.add(course)
    for coupon in sample_coupons(now):
        await repos.coupons.add(coupon)
    for record in sample_access_codes():
        await repos.access_codes.add(record)
    await repos.enrollments.create(
        Enrollment.new(student_id="user-2", course_id="course-1", enrolled_at=now)
    )
