"""Tests for exercise logging, points and streak integration."""

from datetime import date

import pytest

from duofit.core.errors import NotFoundError, ValidationError
from duofit.schemas.exercise import ExerciseUpdate
from duofit.services import exercises, points_ledger, streaks


class TestComputePoints:
    @pytest.mark.parametrize(
        "exercise_type,minutes,expected",
        [
            ("CARDIO", 20, 0),
            ("CARDIO", 29, 0),
            ("CARDIO", 30, 1),
            ("CARDIO", 45, 1),
            ("CARDIO", 60, 2),
            ("cardio", 95, 3),
            ("STRENGTH", 10, 2),
            ("STRENGTH", 120, 2),
            ("OTHER", 5, 1),
        ],
    )
    def test_points(self, exercise_type, minutes, expected):
        assert exercises.compute_points(exercise_type, minutes) == expected

    def test_unknown_type(self):
        with pytest.raises(ValidationError):
            exercises.compute_points("SWIMMING", 30)


class TestLogExercise:
    def test_awards_points_and_starts_streak(self, db, clock, today, user_b):
        exercise = exercises.log_exercise(db, user_b.id, "CARDIO", "Corrida", 45, clock=clock)

        assert exercise.points == 1
        assert clock.date_key(exercise.performed_at) == today
        assert points_ledger.get_daily_points(db, user_b.id, today).exercise_points == 1
        assert streaks.get_streak(db, user_b.id).current == 1

    def test_zero_point_session_still_counts_for_streak(self, db, clock, today, user_b):
        exercises.log_exercise(db, user_b.id, "CARDIO", "Bike", 45, day=date(2024, 3, 14), clock=clock)
        exercise = exercises.log_exercise(db, user_b.id, "CARDIO", "Bike", 20, clock=clock)

        assert exercise.points == 0
        assert points_ledger.get_daily_points(db, user_b.id, today).total_points == 0
        assert streaks.get_streak(db, user_b.id).current == 2

    def test_validation(self, db, clock, user_b):
        with pytest.raises(ValidationError):
            exercises.log_exercise(db, user_b.id, "CARDIO", "  ", 30, clock=clock)
        with pytest.raises(ValidationError):
            exercises.log_exercise(db, user_b.id, "CARDIO", "Corrida", -5, clock=clock)
        with pytest.raises(ValidationError):
            exercises.log_exercise(db, user_b.id, "DANCE", "Forró", 30, clock=clock)

    def test_unknown_user(self, db, clock):
        with pytest.raises(NotFoundError):
            exercises.log_exercise(db, 77, "OTHER", "Yoga", 30, clock=clock)


class TestEditExercise:
    def test_deletion_retracts_exactly_its_points(self, db, clock, today, user_a):
        exercises.log_exercise(db, user_a.id, "CARDIO", "Corrida", 45, clock=clock)
        strength = exercises.log_exercise(db, user_a.id, "STRENGTH", "Agachamento", 50, clock=clock)
        assert points_ledger.get_daily_points(db, user_a.id, today).exercise_points == 3

        exercises.delete_exercise(db, strength.id, clock)

        points = points_ledger.get_daily_points(db, user_a.id, today)
        assert points.exercise_points == 1
        assert points.total_points == 1

    def test_update_applies_point_difference(self, db, clock, today, user_a):
        exercise = exercises.log_exercise(db, user_a.id, "CARDIO", "Corrida", 45, clock=clock)

        updated = exercises.update_exercise(db, exercise.id, ExerciseUpdate(duration_min=95), clock)
        assert updated.points == 3
        assert points_ledger.get_daily_points(db, user_a.id, today).exercise_points == 3

        updated = exercises.update_exercise(db, exercise.id, ExerciseUpdate(type="OTHER"), clock)
        assert updated.points == 1
        assert updated.duration_min == 95
        assert points_ledger.get_daily_points(db, user_a.id, today).total_points == 1

    def test_update_missing_exercise(self, db, clock):
        with pytest.raises(NotFoundError):
            exercises.update_exercise(db, 5, ExerciseUpdate(name="x"), clock)

    def test_delete_missing_exercise(self, db, clock):
        with pytest.raises(NotFoundError):
            exercises.delete_exercise(db, 5, clock)

    def test_list_by_user(self, db, clock, user_a, user_b):
        exercises.log_exercise(db, user_a.id, "OTHER", "Yoga", 30, clock=clock)
        exercises.log_exercise(db, user_b.id, "OTHER", "Pilates", 30, clock=clock)
        assert [e.name for e in exercises.list_exercises(db, user_a.id)] == ["Yoga"]
        assert len(exercises.list_exercises(db)) == 2
