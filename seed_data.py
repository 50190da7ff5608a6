#!/usr/bin/env python3

from datetime import date, time
from decimal import Decimal

from coachline.database import SessionLocal, init_db
from coachline.models import (
    PassengerType, Operator, Station, Route, Amenity, Schedule, ExceptionDay,
    ScheduleTime, ScheduleStation, Holiday
)

def _schedule_time(departure, arrival, stops, weekday=True, saturday=True, sunday=True, holiday=True):
    """Build a departure with its intermediate stops: stops = [(station, "HH:MM", km), ...]"""
    return ScheduleTime(
        departure_time=departure,
        arrival_time=arrival,
        is_weekday_active=weekday,
        is_saturday_active=saturday,
        is_sunday_active=sunday,
        is_holiday_active=holiday,
        schedule_stations=[
            ScheduleStation(
                station=station,
                arrival_time=time.fromisoformat(arrival_at),
                distance_from_previous_stop=Decimal(str(distance))
            )
            for station, arrival_at, distance in stops
        ]
    )

def create_seed_data():
    init_db()
    db = SessionLocal()

    try:
        print("🚀 Creating seed data for Coachline Route Search...")

        # Clear existing data (in reverse dependency order)
        print("Clearing existing data...")
        db.query(ScheduleStation).delete()
        db.query(ScheduleTime).delete()
        db.query(ExceptionDay).delete()
        db.query(Schedule).delete()
        db.query(Amenity).delete()
        db.query(Route).delete()
        db.query(Station).delete()
        db.query(Operator).delete()
        db.query(Holiday).delete()
        db.query(PassengerType).delete()

        # 1. Create Passenger Types
        print("Creating passenger types...")
        passenger_types = [
            PassengerType(name="adult", discount_percentage=Decimal("0.00")),
            PassengerType(name="child", discount_percentage=Decimal("50.00")),
            PassengerType(name="senior", discount_percentage=Decimal("30.00")),
            PassengerType(name="student", discount_percentage=Decimal("20.00")),
        ]
        db.add_all(passenger_types)
        db.flush()

        # 2. Create Operators
        print("Creating operators...")
        operators = [
            Operator(name="Northern Express", status="active"),
            Operator(name="Coastal Coaches", status="active"),
            Operator(name="Budget Bus", status="active"),
        ]
        db.add_all(operators)
        db.flush()
        northern, coastal, budget = operators

        # 3. Create Stations
        print("Creating stations...")
        stations = {
            "Central": Station(name="Central Bus Terminal", city="Capital", lat=Decimal("51.507400"), long=Decimal("-0.127800")),
            "Airport": Station(name="Airport Interchange", city="Capital", lat=Decimal("51.470000"), long=Decimal("-0.454300")),
            "Midway": Station(name="Midway Services", city="Midway", lat=Decimal("52.205300"), long=Decimal("0.121800")),
            "Harbour": Station(name="Harbour Coach Station", city="Portsea", lat=Decimal("50.798900"), long=Decimal("-1.091200")),
            "North": Station(name="North Gate", city="Northfield", lat=Decimal("53.480800"), long=Decimal("-2.242600")),
        }
        db.add_all(stations.values())
        db.flush()

        # 4. Create Routes with amenities and schedules
        print("Creating routes and schedules...")
        year = date.today().year
        routes = [
            Route(
                origin="Capital",
                destination="Northfield",
                price=Decimal("24.00"),
                return_ticket_price=Decimal("42.00"),
                operator=northern,
                amenity=Amenity(number_of_seats=49, luggage_capacity=40, has_wifi=True,
                                has_air_conditioning=True, has_power_outlets=True, has_restroom=True),
                schedules=[
                    Schedule(
                        valid_from=date(year, 1, 1),
                        valid_to=date(year, 12, 31),
                        exception_days=[ExceptionDay(date=date(year, 12, 25), reason="Christmas Day")],
                        schedule_times=[
                            _schedule_time(time(7, 0), time(11, 30), [
                                (stations["Central"], "07:00", 0),
                                (stations["Midway"], "09:10", 96.5),
                                (stations["North"], "11:30", 112.0),
                            ]),
                            _schedule_time(time(15, 0), time(19, 45), [
                                (stations["Central"], "15:00", 0),
                                (stations["Midway"], "17:15", 96.5),
                                (stations["North"], "19:45", 112.0),
                            ], saturday=False, sunday=False),
                            _schedule_time(time(22, 30), time(3, 15), [
                                (stations["Central"], "22:30", 0),
                                (stations["North"], "03:15", 208.5),
                            ], holiday=False),
                        ]
                    )
                ]
            ),
            Route(
                origin="Capital",
                destination="Northfield",
                price=Decimal("12.50"),
                return_ticket_price=Decimal("22.00"),
                operator=budget,
                amenity=Amenity(number_of_seats=57, luggage_capacity=30, has_wifi=False,
                                has_air_conditioning=True, has_power_outlets=False, has_restroom=True),
                schedules=[
                    Schedule(
                        valid_from=date(year, 3, 1),
                        valid_to=date(year, 10, 31),
                        schedule_times=[
                            _schedule_time(time(9, 15), time(14, 40), [
                                (stations["Airport"], "09:15", 0),
                                (stations["Midway"], "11:50", 120.0),
                                (stations["North"], "14:40", 112.0),
                            ]),
                        ]
                    )
                ]
            ),
            Route(
                origin="Capital",
                destination="Portsea",
                price=Decimal("18.00"),
                return_ticket_price=Decimal("30.00"),
                operator=coastal,
                amenity=Amenity(number_of_seats=53, luggage_capacity=35, has_wifi=True,
                                has_air_conditioning=False, has_power_outlets=True, has_restroom=False),
                schedules=[
                    Schedule(
                        valid_from=date(year, 1, 1),
                        valid_to=date(year, 12, 31),
                        schedule_times=[
                            _schedule_time(time(8, 30), time(10, 45), [
                                (stations["Central"], "08:30", 0),
                                (stations["Harbour"], "10:45", 118.0),
                            ]),
                            _schedule_time(time(17, 30), time(19, 50), [
                                (stations["Central"], "17:30", 0),
                                (stations["Harbour"], "19:50", 118.0),
                            ]),
                        ]
                    )
                ]
            ),
        ]
        db.add_all(routes)
        db.flush()

        # 5. Create Holidays
        print("Creating holiday calendar...")
        holidays = [
            Holiday(date=date(year, 1, 1), name="New Year's Day"),
            Holiday(date=date(year, 12, 25), name="Christmas Day"),
            Holiday(date=date(year, 12, 26), name="Boxing Day"),
        ]
        db.add_all(holidays)

        # Commit all changes
        db.commit()
        departures = sum(len(schedule.schedule_times) for route in routes for schedule in route.schedules)
        print("✅ Successfully created seed data for Coachline Route Search!")
        print(f"Created:")
        print(f"  - {len(passenger_types)} passenger types")
        print(f"  - {len(operators)} operators")
        print(f"  - {len(stations)} stations")
        print(f"  - {len(routes)} routes")
        print(f"  - {departures} scheduled departures")
        print(f"  - {len(holidays)} holidays")

    except Exception as e:
        print(f"❌ Error creating seed data: {e}")
        db.rollback()
        raise
    finally:
        db.close()

if __name__ == "__main__":
    create_seed_data()
