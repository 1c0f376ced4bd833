from django.test import TestCase

from doctors.services import DoctorDirectory
from factories.scheduling import DoctorFactory


class DoctorDirectoryTests(TestCase):

    def setUp(self):
        self.directory = DoctorDirectory()
        self.active = DoctorFactory()
        self.retired = DoctorFactory(is_active=False)

    def test_exists_ignores_active_flag(self):
        self.assertTrue(self.directory.exists(self.active.pk))
        self.assertTrue(self.directory.exists(self.retired.pk))
        self.assertFalse(self.directory.exists(999999))

    def test_is_active(self):
        self.assertTrue(self.directory.is_active(self.active.pk))
        self.assertFalse(self.directory.is_active(self.retired.pk))
        self.assertFalse(self.directory.is_active(999999))

    def test_get(self):
        self.assertEqual(self.directory.get(self.active.pk), self.active)
        self.assertIsNone(self.directory.get(999999))
