from __future__ import annotations

from django.test import TestCase

from filter_manager.filters.builtin import MAY_HAVE_TENANT, MUST_HAVE_TENANT
from filter_manager.filters.errors import ParameterTypeMismatchError
from filter_manager.session import StaticSession
from filter_manager.unit_of_work import UnitOfWork
from tests.testapp.factories import LegacyRecordFactory, NoteFactory, PersonFactory
from tests.testapp.models import LegacyRecord, Note, Person


class MustHaveTenantFilterTests(TestCase):
    @classmethod
    def setUpTestData(cls) -> None:
        PersonFactory(name="t1-a", tenant_id=1)
        PersonFactory(name="t1-b", tenant_id=1)
        PersonFactory(name="t2-a", tenant_id=2)

    def names(self, session: StaticSession) -> set[str]:
        with UnitOfWork(session) as uow:
            return set(uow.query(Person).values_list("name", flat=True))

    def test_tenant_actor_sees_only_own_rows(self):
        self.assertEqual(self.names(StaticSession(tenant_id=1)), {"t1-a", "t1-b"})
        self.assertEqual(self.names(StaticSession(tenant_id=2)), {"t2-a"})

    def test_host_actor_sees_all_tenants(self):
        self.assertEqual(
            self.names(StaticSession(tenant_id=1, host=True)),
            {"t1-a", "t1-b", "t2-a"},
        )

    def test_actor_without_tenant_sees_all_tenants(self):
        self.assertEqual(self.names(StaticSession()), {"t1-a", "t1-b", "t2-a"})

    def test_disabling_lifts_isolation_for_the_scope(self):
        with UnitOfWork(StaticSession(tenant_id=2)) as uow:
            with uow.disable_filter(MUST_HAVE_TENANT):
                self.assertEqual(uow.count(Person), 3)
            self.assertEqual(uow.count(Person), 1)

    def test_switching_the_tenant_parameter(self):
        with UnitOfWork(StaticSession(tenant_id=2)) as uow:
            uow.set_filter_parameter(MUST_HAVE_TENANT, "tenant_id", 1)

            self.assertEqual(uow.count(Person), 2)

    def test_wrong_parameter_type_keeps_previous_tenant(self):
        with UnitOfWork(StaticSession(tenant_id=2)) as uow:
            with self.assertRaises(ParameterTypeMismatchError):
                uow.set_filter_parameter(MUST_HAVE_TENANT, "tenant_id", 1.5)

            self.assertEqual(uow.filters.get_parameter(MUST_HAVE_TENANT, "tenant_id"), 2)
            self.assertEqual(uow.count(Person), 1)

    def test_enabling_for_a_host_without_tenant_hides_tenant_rows(self):
        with UnitOfWork(StaticSession(host=True)) as uow:
            uow.enable_filter(MUST_HAVE_TENANT)

            self.assertEqual(uow.count(Person), 0)

    def test_explicitly_declared_tenant_field(self):
        LegacyRecordFactory(label="mine", owner=5)
        LegacyRecordFactory(label="theirs", owner=6)

        with UnitOfWork(StaticSession(tenant_id=5)) as uow:
            labels = set(uow.query(LegacyRecord).values_list("label", flat=True))

        self.assertEqual(labels, {"mine"})


class MayHaveTenantFilterTests(TestCase):
    @classmethod
    def setUpTestData(cls) -> None:
        NoteFactory(title="host", tenant_id=None)
        NoteFactory(title="t1", tenant_id=1)
        NoteFactory(title="t2", tenant_id=2)

    def titles(self, uow: UnitOfWork) -> set[str]:
        return set(uow.query(Note).values_list("title", flat=True))

    def test_tenant_sees_own_and_host_rows(self):
        with UnitOfWork(StaticSession(tenant_id=1)) as uow:
            self.assertEqual(self.titles(uow), {"host", "t1"})

    def test_host_rows_are_never_excluded(self):
        for tenant_id in (1, 2, 3):
            with UnitOfWork(StaticSession(tenant_id=tenant_id)) as uow:
                self.assertIn("host", self.titles(uow))

    def test_host_actor_is_not_auto_disabled(self):
        with UnitOfWork(StaticSession(host=True)) as uow:
            self.assertTrue(uow.is_filter_enabled(MAY_HAVE_TENANT))
            self.assertEqual(self.titles(uow), {"host"})

    def test_disabling_shows_every_tenant(self):
        with UnitOfWork(StaticSession(tenant_id=1)) as uow:
            with uow.disable_filter(MAY_HAVE_TENANT):
                self.assertEqual(self.titles(uow), {"host", "t1", "t2"})


class TenantAssignmentOnSaveTests(TestCase):
    def test_save_fills_missing_tenant(self):
        with UnitOfWork(StaticSession(tenant_id=4)) as uow:
            person = uow.save(Person(name="new"))
            note = uow.save(Note(title="new"))

        person.refresh_from_db()
        note.refresh_from_db()
        self.assertEqual(person.tenant_id, 4)
        self.assertEqual(note.tenant_id, 4)

    def test_save_never_overwrites_explicit_tenant(self):
        with UnitOfWork(StaticSession(tenant_id=4)) as uow:
            person = uow.save(Person(name="other", tenant_id=9))

        self.assertEqual(Person.objects.get(pk=person.pk).tenant_id, 9)

    def test_host_save_leaves_optional_tenant_empty(self):
        with UnitOfWork(StaticSession(host=True)) as uow:
            note = uow.save(Note(title="host note"))

        self.assertIsNone(Note.objects.get(pk=note.pk).tenant_id)
