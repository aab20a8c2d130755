"""Tests for MovieAdapter.

Most tests mock the store so each failure mode can be forced and the store
calls counted. `TestAgainstStore` runs the same adapter on mongomock.
"""

from unittest.mock import MagicMock, patch

import pytest
from pymongo import errors

from movie_catalog.adapter import MovieAdapter
from movie_catalog.exceptions import RecordNotFoundError
from movie_catalog.models import DataOutcome, ErrorOutcome, MessageOutcome, Movie
from movie_catalog.mongo import MongoMovieStore

from .factories import generate_movie_with_id, generate_movie_without_id


@pytest.fixture
def store_mock():
    return MagicMock(spec=MongoMovieStore)


@pytest.fixture
def mocked_adapter(store_mock):
    return MovieAdapter(store_mock)


class TestGetMovies:
    def test_returns_all_movies(self, mocked_adapter, store_mock):
        movie = generate_movie_with_id()
        store_mock.find_all.return_value = [movie]

        result = mocked_adapter.get_movies()

        assert result == DataOutcome(status=200, data=[movie])
        store_mock.find_all.assert_called_once()

    def test_empty_collection_is_empty_list(self, mocked_adapter, store_mock):
        store_mock.find_all.return_value = []

        assert mocked_adapter.get_movies().data == []

    def test_store_failure_degrades_to_null(self, mocked_adapter, store_mock):
        store_mock.find_all.side_effect = errors.ServerSelectionTimeoutError("down")

        result = mocked_adapter.get_movies()

        assert result == DataOutcome(status=200, data=None)
        store_mock.find_all.assert_called_once()


class TestLookups:
    def test_get_movie_by_id(self, mocked_adapter, store_mock):
        movie = generate_movie_with_id()
        store_mock.find_by_id.return_value = movie

        assert mocked_adapter.get_movie_by_id(movie.id).data == movie
        store_mock.find_by_id.assert_called_once_with(movie.id)

    def test_missing_id_is_null(self, mocked_adapter, store_mock):
        store_mock.find_by_id.return_value = None

        assert mocked_adapter.get_movie_by_id(999) == DataOutcome(status=200, data=None)

    def test_get_movie_by_id_store_failure(self, mocked_adapter, store_mock):
        store_mock.find_by_id.side_effect = Exception("Error fetching movie by id")

        assert mocked_adapter.get_movie_by_id(1).data is None

    def test_get_movie_by_name(self, mocked_adapter, store_mock):
        movie = generate_movie_with_id()
        store_mock.find_by_name.return_value = movie

        assert mocked_adapter.get_movie_by_name(movie.name).data == movie
        store_mock.find_by_name.assert_called_once_with(movie.name)

    def test_get_movie_by_name_store_failure(self, mocked_adapter, store_mock):
        store_mock.find_by_name.side_effect = Exception("Error fetching movie by name")

        assert mocked_adapter.get_movie_by_name("The Matrix").data is None


class TestAddMovie:
    def test_adds_without_id(self, mocked_adapter, store_mock):
        fields = {**generate_movie_without_id(), "name": "Inception"}
        movie = Movie(id=1, **fields)
        store_mock.find_by_name.return_value = None
        store_mock.create.return_value = movie

        result = mocked_adapter.add_movie(fields)

        assert result == DataOutcome(status=200, data=movie)
        store_mock.create.assert_called_once_with(fields, None)

    def test_adds_with_id(self, mocked_adapter, store_mock):
        fields = {**generate_movie_without_id(), "name": "Inception"}
        store_mock.find_by_name.return_value = None
        store_mock.create.return_value = Movie(id=5, **fields)

        result = mocked_adapter.add_movie(fields, 5)

        assert result.data.id == 5
        store_mock.create.assert_called_once_with(fields, 5)

    def test_existing_name_is_conflict_without_write(self, mocked_adapter, store_mock):
        fields = {**generate_movie_without_id(), "name": "Inception"}
        store_mock.find_by_name.return_value = Movie(id=1, name="Inception", year=1990, rating=1.0)

        result = mocked_adapter.add_movie(fields)

        assert result == ErrorOutcome(status=409, error="Movie Inception already exists")
        assert store_mock.create.call_count == 0

    def test_unique_index_violation_is_conflict(self, mocked_adapter, store_mock):
        store_mock.find_by_name.return_value = None
        store_mock.create.side_effect = errors.DuplicateKeyError("E11000 duplicate key")

        result = mocked_adapter.add_movie({"name": "Inception", "year": 2010, "rating": 8.5})

        assert result.status == 409

    def test_unexpected_error_is_500(self, mocked_adapter, store_mock):
        error = Exception("Unexpected error")
        store_mock.find_by_name.return_value = None
        store_mock.create.side_effect = error

        with patch.object(mocked_adapter, "_handle_error", wraps=mocked_adapter._handle_error) as spy:
            result = mocked_adapter.add_movie(generate_movie_without_id())

        assert result == ErrorOutcome(status=500, error="Internal server error")
        spy.assert_called_once_with(error, None)


class TestUpdateMovie:
    movie_id = 1
    existing = Movie(id=1, name="Inception", year=2010, rating=7.5)
    changes = {"name": "The Dark Knight", "year": 2008, "rating": 8.5}

    def test_updates_existing_movie(self, mocked_adapter, store_mock):
        updated = Movie(id=self.movie_id, **self.changes)
        store_mock.find_by_id.return_value = self.existing
        store_mock.update.return_value = updated

        result = mocked_adapter.update_movie(self.changes, self.movie_id)

        assert result == DataOutcome(status=200, data=updated)
        store_mock.find_by_id.assert_called_once_with(self.movie_id)
        store_mock.update.assert_called_once_with(self.movie_id, self.changes)

    def test_missing_movie_is_404_without_write(self, mocked_adapter, store_mock):
        store_mock.find_by_id.return_value = None

        result = mocked_adapter.update_movie(self.changes, self.movie_id)

        assert result == ErrorOutcome(status=404, error="Movie with ID 1 not found")
        store_mock.update.assert_not_called()

    def test_deleted_between_check_and_update_is_404(self, mocked_adapter, store_mock):
        store_mock.find_by_id.return_value = self.existing
        store_mock.update.side_effect = RecordNotFoundError(self.movie_id)

        assert mocked_adapter.update_movie(self.changes, self.movie_id).status == 404

    def test_unexpected_error_is_500(self, mocked_adapter, store_mock):
        error = Exception("Unexpected error")
        store_mock.find_by_id.return_value = self.existing
        store_mock.update.side_effect = error

        with patch.object(mocked_adapter, "_handle_error", wraps=mocked_adapter._handle_error) as spy:
            result = mocked_adapter.update_movie(self.changes, self.movie_id)

        assert result == ErrorOutcome(status=500, error="Internal server error")
        spy.assert_called_once_with(error, self.movie_id)


class TestDeleteMovie:
    def test_deletes_movie(self, mocked_adapter, store_mock):
        movie = generate_movie_with_id()
        store_mock.delete.return_value = movie

        result = mocked_adapter.delete_movie_by_id(movie.id)

        assert result == MessageOutcome(
            status=200, message=f"Movie {movie.id} has been deleted", movie=movie
        )
        assert result.body() == {"status": 200, "message": f"Movie {movie.id} has been deleted"}
        store_mock.delete.assert_called_once_with(movie.id)

    def test_missing_movie_is_404(self, mocked_adapter, store_mock):
        store_mock.delete.side_effect = RecordNotFoundError(999)

        result = mocked_adapter.delete_movie_by_id(999)

        assert result == ErrorOutcome(status=404, error="Movie with ID 999 not found")

    def test_unexpected_error_is_reraised(self, mocked_adapter, store_mock):
        error = Exception("Unexpected error")
        store_mock.delete.side_effect = error

        with patch.object(mocked_adapter, "_handle_error", wraps=mocked_adapter._handle_error) as spy:
            with pytest.raises(Exception, match="Unexpected error"):
                mocked_adapter.delete_movie_by_id(999)

        spy.assert_called_once_with(error, 999)
        assert store_mock.delete.call_count == 1


class TestAgainstStore:
    def test_create_then_get_returns_same_movie(self, adapter):
        created = adapter.add_movie({"name": "Inception", "year": 2010, "rating": 8.5})

        assert created.status == 200
        assert adapter.get_movie_by_id(created.data.id).data == created.data

    def test_conflict_ignores_other_fields(self, adapter):
        adapter.add_movie({"name": "Inception", "year": 2010, "rating": 8.5})

        result = adapter.add_movie({"name": "Inception", "year": 1950, "rating": 1.0})

        assert result == ErrorOutcome(status=409, error="Movie Inception already exists")
        assert len(adapter.get_movies().data) == 1

    def test_repeated_delete_of_missing_id_is_identical(self, adapter):
        first = adapter.delete_movie_by_id(12345)
        second = adapter.delete_movie_by_id(12345)

        assert first == second == ErrorOutcome(status=404, error="Movie with ID 12345 not found")

    def test_inception_scenario(self, adapter):
        created = adapter.add_movie({"name": "Inception", "year": 2010, "rating": 8.5})
        movie_id = created.data.id

        assert created.body() == {
            "status": 200,
            "data": {"id": movie_id, "name": "Inception", "year": 2010, "rating": 8.5},
        }
        assert adapter.delete_movie_by_id(movie_id).body() == {
            "status": 200,
            "message": f"Movie {movie_id} has been deleted",
        }
        assert adapter.delete_movie_by_id(movie_id).body() == {
            "status": 404,
            "error": f"Movie with ID {movie_id} not found",
        }
