"""Tests for relations between models."""

import pytest

from activerecord import (
    BelongsToRelation,
    HasManyRelation,
    Model,
    ModelCollection,
    ModelDefinition,
    Query,
    SQLiteConnection,
)
from activerecord.exceptions import ActiveRecordClassNotValid, RelationNotDefined
from activerecord.models import HasManyDefinition
from activerecord.schema import SchemaBuilder

from tests.acme import (
    CARS_SCHEMA,
    TAGS_SCHEMA,
    Appointment,
    Article,
    Brand,
    Car,
    Category,
    Driver,
    Patient,
    Physician,
    RecordingConnection,
    acme_definitions,
)


class TestRelationCollection:
    """Test the relations built for a model."""

    def test_belongs_to_from_schema(self, models: ModelCollection) -> None:
        relations = models["cars"].relations
        relation = relations["brand"]

        assert isinstance(relation, BelongsToRelation)
        assert relation.local_key == "brand_id"
        assert relation.foreign_key == "brand_id"
        assert relation.related is models["brands"]

    def test_has_many_from_definition(self, models: ModelCollection) -> None:
        relation = models["brands"].relations["cars"]

        assert isinstance(relation, HasManyRelation)
        assert relation.local_key == "brand_id"
        assert relation.foreign_key == "brand_id"
        assert relation.through is None

    def test_names(self, models: ModelCollection) -> None:
        assert list(models["physicians"].relations) == ["appointments", "patients"]
        assert list(models["appointments"].relations) == ["physician", "patient"]
        assert "category" in models["articles"].relations
        assert len(models["tags"].relations) == 0

    def test_belongs_to_alias(self, memory_connection: SQLiteConnection) -> None:
        schema = (
            SchemaBuilder()
            .add_serial("car_id", primary=True)
            .add_foreign("brand_id", "brands", as_="maker")
            .build()
        )
        definitions = [d for d in acme_definitions() if d.id != "cars"]
        models = ModelCollection(
            memory_connection, [*definitions, ModelDefinition("cars", schema, record_class=Car)]
        )

        assert list(models["cars"].relations) == ["maker"]

    def test_relation_not_defined(self, models: ModelCollection) -> None:
        with pytest.raises(RelationNotDefined) as exc_info:
            models["cars"].relations["unknown"]

        assert exc_info.value.relation_name == "unknown"
        assert exc_info.value.model is models["cars"]

    def test_requires_concrete_record_class(self, memory_connection: SQLiteConnection) -> None:
        models = ModelCollection(memory_connection, [ModelDefinition("cars", CARS_SCHEMA)])

        with pytest.raises(ActiveRecordClassNotValid, match="concrete ActiveRecord class"):
            models["cars"].relations

    def test_has_many_requires_keys(self, memory_connection: SQLiteConnection) -> None:
        models = ModelCollection(
            memory_connection,
            [
                ModelDefinition(
                    "tags",
                    TAGS_SCHEMA,
                    record_class=Article,
                    has_many=[HasManyDefinition("articles")],
                )
            ],
        )

        with pytest.raises(ValueError, match="requires explicit keys"):
            models["tags"].relations

    def test_find(self, models: ModelCollection) -> None:
        relations = models["appointments"].relations

        found = relations.find(lambda r: r.related_id == "patients")

        assert found is relations["patient"]
        assert relations.find(lambda r: r.related_id == "drivers") is None


class TestBelongsTo:
    """Test belongs-to relations."""

    def test_getter(self, models: ModelCollection) -> None:
        brand = Brand(name="renault").save()
        car = Car(name="clio", brand_id=brand.brand_id).save()

        related = car.brand

        assert isinstance(related, Brand)
        assert related.name == "renault"
        assert car.brand is related
        assert car.relation("brand") is related

    def test_getter_without_key(self, models: ModelCollection) -> None:
        assert Driver(name="alain").car is None

    def test_setter(self, models: ModelCollection) -> None:
        brand = Brand(name="renault").save()
        car = Car(name="clio", brand=brand)

        assert car.brand_id == brand.brand_id
        assert "brand" not in car.__dict__

        car.brand = None
        assert car.brand_id is None

    def test_getter_missing_record(self, models: ModelCollection) -> None:
        from activerecord.exceptions import RecordNotFound

        with pytest.raises(RecordNotFound):
            Car(name="clio", brand_id=99).brand


class TestHasMany:
    """Test has-many relations."""

    def test_getter_returns_a_query(self, models: ModelCollection) -> None:
        brand = Brand(name="renault").save()
        other = Brand(name="peugeot").save()
        Car(name="clio", brand=brand).save()
        Car(name="megane", brand=brand).save()
        Car(name="208", brand=other).save()

        cars = brand.cars

        assert isinstance(cars, Query)
        assert cars.count() == 2
        assert [car.name for car in cars.order("name")] == ["clio", "megane"]
        assert all(isinstance(car, Car) for car in cars.all())

    def test_explicit_foreign_key(self, models: ModelCollection) -> None:
        category = Category(name="music").save()
        Article(title="madonna", category=category).save()
        Article(title="orphan").save()

        assert [article.title for article in category.articles] == ["madonna"]

    def test_chained_relations(self, models: ModelCollection) -> None:
        brand = Brand(name="renault").save()
        car = Car(name="clio", brand=brand).save()
        Driver(name="alain", car=car).save()

        drivers = brand.cars.one().drivers.all()

        assert [driver.name for driver in drivers] == ["alain"]
        assert drivers[0].car.brand is brand.cars.one().brand

    def test_through_rendering(self, mysql_connection: RecordingConnection) -> None:
        models = ModelCollection(mysql_connection, acme_definitions())
        physician = Physician(models["physicians"], physician_id=3)

        assert physician.patients.render() == (
            "SELECT `patient`.* FROM `patients` `patient`"
            " INNER JOIN `appointments` ON `appointments`.`patient_id` = `patient`.`patient_id`"
            " INNER JOIN `physicians` `physician`"
            " ON `appointments`.`physician_id` = `physician`.`physician_id`"
            " WHERE (`physician`.`physician_id` = ?)",
            [3],
        )

    def test_through(self, models: ModelCollection) -> None:
        house = Physician(name="house").save()
        wilson = Physician(name="wilson").save()
        patients = [Patient(name=name).save() for name in ("alice", "bob", "carol")]

        for physician, patient in [
            (house, patients[0]),
            (house, patients[1]),
            (wilson, patients[1]),
            (wilson, patients[2]),
        ]:
            Appointment(
                physician=physician,
                patient=patient,
                appointment_date="2024-01-01 10:00:00",
            ).save()

        assert sorted(p.name for p in house.patients) == ["alice", "bob"]
        assert sorted(p.name for p in patients[1].physicians) == ["house", "wilson"]
        assert house.appointments.count() == 2

    def test_through_missing_pivot_relation(self, memory_connection: SQLiteConnection) -> None:
        definitions = [d for d in acme_definitions() if d.id != "appointments"]
        pivot_schema = (
            SchemaBuilder()
            .add_serial("appointment_id", primary=True)
            .add_foreign("physician_id", "physicians")
            .build()
        )
        models = ModelCollection(
            memory_connection,
            [*definitions, ModelDefinition("appointments", pivot_schema, record_class=Appointment)],
        )
        physician = Physician(models["physicians"], physician_id=1)

        with pytest.raises(RelationNotDefined, match="patients"):
            physician.patients


def test_repr(models: ModelCollection) -> None:
    model: Model = models["cars"]

    assert repr(model.relations["brand"]) == "<BelongsToRelation cars.brand -> brands>"
