from dataclasses import replace

from v2vmap.vehicle import Vehicle


def test_defaults():
    vehicle = Vehicle()
    assert vehicle.id == 0
    assert vehicle.latitude == 0.0
    assert vehicle.longitude == 0.0
    assert vehicle.speed_kmh == 0.0
    assert vehicle.transmission_radius_meters == 0.0
    assert vehicle.edge_id == 0
    assert vehicle.highway_type == ""


def test_constructor_keeps_values():
    vehicle = Vehicle(3, 47.5, 7.25, 30.0, 250.0, 42, "residential")
    assert vehicle.id == 3
    assert (vehicle.latitude, vehicle.longitude) == (47.5, 7.25)
    assert vehicle.speed_kmh == 30.0
    assert vehicle.transmission_radius_meters == 250.0
    assert vehicle.edge_id == 42
    assert vehicle.highway_type == "residential"


def test_set_lat_lon_moves_vehicle_only():
    vehicle = Vehicle(id=1, speed_kmh=50.0)
    vehicle.set_lat_lon(48.1, 2.3)
    assert vehicle.latitude == 48.1
    assert vehicle.longitude == 2.3
    assert vehicle.speed_kmh == 50.0


def test_copy_is_independent():
    original = Vehicle(id=1, latitude=1.0, longitude=2.0)
    copy = replace(original, id=2)
    copy.set_lat_lon(5.0, 6.0)
    assert original.id == 1
    assert (original.latitude, original.longitude) == (1.0, 2.0)
    assert copy.id == 2