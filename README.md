# higo

Building blocks for web applications, usable on their own:

- `higo.sqlexpr` – SQL text fragments: quoted field lists (`field`),
  joins (`joins`, `left_join`, `right_join`, `inner_join`), the `is_null`
  and `if_` functions, and composable conditions (`condition`, `raw`,
  `between`, `in_`, `not_in`, `is_null_condition`, `like`, grouped with
  `and_` / `or_` and rendered with `perd`).
- `higo.statement` – `select`, `insert`, `update` and `delete` builders
  that render to SQL text with `?` placeholders plus a list of arguments.
  `SelectBuilder` is immutable and supports `columns`, `from_`, `join`,
  `where`, `group_by`, `having`, `order_by`, `limit` and `offset`.
- `higo.event` – a topic-based `EventBus`; subscribers get an
  `EventDataChannel` on which the topic handler's result is delivered.
- `higo.ratelimit` – a token `Bucket`, an expiring LRU `GCache`, a
  `RequestContext` and the handler wrappers `limiter`, `param_limiter`
  and `ip_limiter`, plus `client_ip`.
- `higo.errcode` – `ErrorCode` integers whose messages live in a
  `CodeRegistry`, the `HigoException` / `DaoException` errors, the
  `throw` / `dao_throw` helpers and `ValidateError`.
- `higo.tasks` – a `TaskQueue` that runs each submitted function on its own
  thread and calls a callback when it finishes.
- `higo.generators` – field descriptions for parameter and value-object
  structs built from sample JSON (`param_fields`, `vo_fields`), error-code
  tables read from YAML (`load_code_yaml`), and the helpers `type_assert`,
  `case_to_camel` and `left_str_pad`.

## Install

    pip install .

For the test suite:

    pip install ".[test]"
    pytest

## Examples

Conditions:

    from higo.sqlexpr import perd, condition, or_, in_

    where = perd(
        condition("user.id", "=", 5),
        or_(in_("state", [1, 2]), condition("name", "LIKE", "%bob%")),
    )
    # "(`user`.`id` = '5') AND (state IN(1,2) OR (`name` LIKE '%bob%'))"

Statements:

    from higo.statement import select, update

    sql, args = update("user").set("name", "bob").where("id", 1).to_sql()
    # sql == "UPDATE user SET name = ? WHERE id = ?", args == ["bob", 1]

    sql, args = select("id", "name").from_("user").where("id = ?", 3).limit(10).to_sql()
    # sql == "SELECT id, name FROM user WHERE id = ? LIMIT 10", args == [3]

Events:

    from higo.event import EventBus

    bus = EventBus()
    channel = bus.sub("list", lambda: [1, 2, 3])
    bus.pub("list", channel)
    channel.data(1.0)   # [1, 2, 3], or {"message": "timeout"} after 1 second

Rate limiting:

    from higo.ratelimit import Bucket, RequestContext, limiter

    bucket = Bucket(cap=10, rate=1)   # refills 1 token per second, up to 10
    if bucket.is_accept():
        ...

    @limiter(1, 1)
    def handler(ctx):
        return "ok"

    ctx = RequestContext()
    handler(ctx)   # "ok"; a rejected call sets ctx.status = 429 and ctx.body

`ip_limiter(cap, rate, key, cache=None)` keeps one bucket per client address
(taken from `X-Forwarded-For`, `X-Real-Ip` or the peer address) for five
seconds, in a shared `GCache` of up to 10000 entries unless a cache is given.

Error codes:

    from higo.errcode import CodeRegistry, ErrorCode, HigoException

    registry = CodeRegistry()
    registry.put(1, "auth failed").put(2, "%s not found")

    class AppCode(ErrorCode):
        registry = registry

    AppCode(2).message("user")   # "user not found"
    AppCode(1).throw()           # raises HigoException with code 1

By default `ErrorCode` uses the module-level registry `higo.errcode.container`.
A `CodeRegistry(autoload=fn)` calls `fn(registry)` the first time a message
is looked up.

Background tasks:

    from higo.tasks import TaskQueue

    with TaskQueue() as tasks:
        tasks.submit(print, lambda: print("done"), "hello")
    # leaving the block waits for every task, then stops the dispatcher

## What this package does not do

There is no HTTP server, router or request binding: the rate-limit wrappers
work on the package's own `RequestContext`, which holds query parameters,
headers and the peer address. The statement builders only produce SQL text
and arguments; nothing here connects to or queries a database. The generator
helpers compute field and code descriptions but do not render or write any
source files.