"""
Example 03: Memory Adapter

This example runs the same mapper against the schemaless in-process
store and shows the condition grammar shared by every adapter.
"""

from data_mapper import ConnectionConfig, Entity, Mapper, UnsupportedOperationError, create_adapter


class TaskMapper(Mapper):
    source = "tasks"
    fields = {
        "id": {"type": "int", "primary": True},
        "title": {"type": "string", "required": True},
        "priority": {"type": "int", "default": 0},
        "done": {"type": "bool", "default": False},
    }


def main():
    adapter = create_adapter(ConnectionConfig(driver="memory"))
    tasks = TaskMapper(adapter)
    tasks.migrate()

    print("=== Memory Adapter ===\n")

    for title, priority in [("Write docs", 2), ("Fix bug", 5), ("Review", 3), ("Release", 5)]:
        tasks.save(Entity(title=title, priority=priority, done=False))

    urgent = tasks.all({"priority >=": 3}).order({"priority": "DESC", "title": "ASC"})
    print("Priority >= 3:")
    for task in urgent:
        print(f"  - [{task.priority}] {task.title}")

    either = tasks.select().where({"title :like": "%bug%"}).or_where({"priority": [2]})
    print(f"\nMatching 'bug' or priority 2: {[t.title for t in either]}")

    task = tasks.first({"title": "Fix bug"})
    task.done = True
    tasks.save(task)
    print(f"Done tasks: {[t.title for t in tasks.all({'done': True})]}")

    try:
        tasks.select().group("priority").execute()
    except UnsupportedOperationError as e:
        print(f"\nGrouping: {e}")


if __name__ == "__main__":
    main()
