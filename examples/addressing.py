#!/usr/bin/env python3
"""
Example demonstrating addressing expressions in SQLDoc
"""

from sqldoc import connect

store = connect()

store.set("users[0]", {
    "name": "John",
    "age": 30,
    "address": {"city": "New York", "state": "NY"},
})
store.set("users[1]", {
    "name": "Jane",
    "age": 25,
    "address": {"city": "San Francisco", "state": "CA"},
})

# Seed a whole collection in one call: one row per element
store.set("usersAllInOnce", [
    {"name": "John", "tags": ["admin", "ops"]},
    {"name": "Jane", "tags": []},
])

store.set("test", "hello world")

print("=" * 60)
print("Addressing Examples")
print("=" * 60)

print("\n1. One record: users[0]")
print(f"   {store.get('users[0]')}")

print("\n2. One leaf: users[1].address.city")
print(f"   {store.get('users[1].address.city')}")

print("\n3. Wildcard row key: users[*].name")
print(f"   {store.get('users[*].name')}")

print("\n4. Wildcard row key, nested object: users[*].address")
print(f"   {store.get('users[*].address')}")

print("\n5. Whole collection: usersAllInOnce")
print(f"   {store.get('usersAllInOnce')}")

print("\n6. Bare scalar: test")
print(f"   {store.get('test')!r}")

print("\n7. Stored rows of users")
for row in store.rows("users"):
    print(f"   {row.name:>3}  {row.path:<15} {row.data!r}")

store.close()

print("\n" + "=" * 60)
print("Supported Address Syntax:")
print("=" * 60)
print("  coll               - Whole collection")
print("  coll[0] / coll.key - One row")
print("  coll[0].a.b[2]     - Member and index access inside a row")
print('  coll["odd key"]    - Quoted member')
print("  coll[*].a          - Wildcard row key")
print("  coll[0].tags[*]    - Single-level wildcard")
print("=" * 60)
