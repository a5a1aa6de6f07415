# merraki

Service and repository layer for a shop that sells spreadsheet templates. It
publishes a blog, sorts templates and posts into categories, handles contact
messages and newsletter sign-ups, and offers business calculators.

## Installation

```
pip install merraki
```

With the test tools:

```
pip install "merraki[test]"
```

## Modules

- `merraki.errors`: `AppError`, with `code`, `message`, `status` and an
  optional `cause`. `NotFoundError` has code `NOT_FOUND` and status 404.
  `wrap(cause, code, message, status)` builds an `AppError` around another
  exception.
- `merraki.database`
  - `Database(connection, paramstyle="pyformat")` runs queries on any DB-API
    connection. Queries are written with `$1`, `$2`, … placeholders, which it
    rewrites for the driver's paramstyle. It offers `fetch_one`, `fetch_all`,
    `fetch_value`, `execute`, `health` and `close`, and works as a context
    manager. Rows come back as dicts. Each statement is committed once it has
    run.
  - `FilterBuilder(base_query, count_query)` builds matching filtered `SELECT`
    and `COUNT` queries. It has `add`, `order_by`, `count_sql` and
    `select_sql(limit, offset)`.
- `merraki.calculator`
  - `calculate_valuation(ValuationInput)` works from five years of revenue, an
    exit multiple and a discount rate. It returns the exit value, a yearly
    present-value breakdown, CAGR, average growth, a recommendation and chart
    series.
  - `calculate_breakeven(BreakevenInput)` returns breakeven units and revenue,
    the contribution margin, and a month-by-month forecast with chart series.
    It raises `ValueError` when the contribution margin is zero or the number
    of months is negative.
  - `CalculatorService` wraps both. It passes results to a calculator
    repository object that you supply.
- `merraki.currency`: `CurrencyService(api_url="", timeout=10.0)`.
  - `get_exchange_rate` reads a built-in INR rate table and returns 1.0 for
    unknown pairs.
  - `get_exchange_rate_from_api` fetches `{api_url}/{from_currency}` and reads
    the `rates` object from the JSON reply. Failures raise `AppError` with code
    `CURRENCY_ERROR`.
- `merraki.payment`
  - `sign(secret, message)` returns the hex HMAC-SHA256 of a message.
  - `PaymentService.verify_signature` checks a signature over
    `order_id|payment_id`, and `verify_webhook_signature` checks one over the
    webhook payload. A mismatch raises `AppError` with code
    `INVALID_SIGNATURE`.
- `merraki.repository`: SQL repositories over a `Database`. Records are plain
  dicts.
  - `blog_repository.BlogRepository`
  - `category_repository.CategoryRepository`, for template and blog categories
  - `template_repository.TemplateRepository`
  - `newsletter_repository.NewsletterRepository`

  Their `get_all(filters, limit, offset)` returns `(rows, total)`. The SQL is
  written for PostgreSQL: `ILIKE`, `NOW()`, array operators, full-text search
  and `FILTER` aggregates.
- `merraki.service`: business rules built on the repositories. They check that
  slugs are unique and derive missing slugs from titles with `python-slugify`.
  They raise `NotFoundError` for missing records and `AppError` for conflicts
  and storage failures. They also log admin actions.
  - `blog_service.BlogService`
  - `category_service.CategoryService`
  - `template_service.TemplateService`
  - `contact_service.ContactService`, with `CreateContactRequest`
  - `newsletter_service.NewsletterService`, with `SubscribeRequest`

## Examples

```python
from merraki.calculator import BreakevenInput, calculate_breakeven

result = calculate_breakeven(
    BreakevenInput(
        fixed_costs=10000.0,
        variable_cost_per_unit=20.0,
        price_per_unit=50.0,
        months_to_forecast=12,
    )
)
print(result.breakeven_units, result.breakeven_month)
```

```python
from merraki.payment import PaymentService, sign

payments = PaymentService(key_id="placeholder", key_secret="secret", webhook_secret="secret")
signature = sign("secret", "order_1|pay_1")
payments.verify_signature("order_1", "pay_1", signature)  # raises AppError on mismatch
```

```python
from merraki.database import FilterBuilder

builder = FilterBuilder("SELECT * FROM templates WHERE 1=1",
                        "SELECT COUNT(*) FROM templates WHERE 1=1")
builder.add("status = {p}", "active").order_by("created_at DESC")
print(builder.select_sql(20, 0))
# ('SELECT * FROM templates WHERE 1=1 AND status = $1 ORDER BY created_at DESC LIMIT $2 OFFSET $3',
#  ['active', 20, 0])
```

## What it does not do

- It has no HTTP server and no command-line program. It is a library only.
- It does not send e-mail. `ContactService` and `NewsletterService` take an
  e-mail service object that you supply. That object must have
  `send_contact_reply(email, name, message)` and
  `send_newsletter_confirmation(email, name)`.
- It has no storage for admin accounts, login sessions, activity logs, contact
  messages or calculator results. The services take a repository object for
  each of these. Activity logs are written with `log_repo.create(dict)`, and
  any failure there is ignored.
- It does not create the database schema.

## Tests

```
pytest
```