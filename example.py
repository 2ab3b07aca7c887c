import logging

from sqlalchemy import Boolean, Column, Date, Integer, MetaData, String, Table, create_engine

from active_record import ActiveRecord, MappingRequest, SqlAlchemyDatabase, SqlAlchemySchema, UnitOfWork


logging.basicConfig(level=logging.DEBUG, format="%(name)s | %(message)s")

metadata = MetaData()
Table(
    "subscribers",
    metadata,
    Column("subscriber_id", Integer, primary_key=True),
    Column("name", String(100), nullable=False),
    Column("newsletter", Boolean),
    Column("subscribed_on", Date),
)


class Subscriber(ActiveRecord):
    pass


engine = create_engine("sqlite://")
connection = engine.connect()
metadata.create_all(connection)
connection.commit()

schema = SqlAlchemySchema(metadata)
unit_of_work = UnitOfWork(
    SqlAlchemyDatabase(connection, schema),
    schema,
    request=MappingRequest({"name": "Seba", "newsletter": "yes", "subscribed_on": "2018-06-01"}),
    debug=True,
)

with unit_of_work:
    subscriber = Subscriber(unit_of_work)
    subscriber.populate()
    subscriber.store()

    same_subscriber = Subscriber(unit_of_work, subscriber.get_subscriber_id())
    assert same_subscriber.values is subscriber.values

    print(subscriber.format_name(), subscriber.format_newsletter(), subscriber.format_subscribed_on("%d %B %Y"))

    subscriber.setNewsletter(False)
    subscriber.store()
    subscriber.delete()

connection.close()
