"""Command-line interface for pizzabox."""

import sys
from pathlib import Path
from typing import List, Optional, Tuple

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .app import AppContext
from .config import ConfigManager
from .core.orders import (
    delete_address, delete_order, dump, format_order, get_order, list_addresses,
    get_address, order_key, print_orders, save_address, save_order,
)
from .errors import NotFoundError, PizzaboxError, ValidationError
from .utils.logging_setup import get_logger, log_operation, setup_logging
from .vendor.address import UserAddress, from_user_address
from .vendor.card import new_card
from .vendor.menu import Menu
from .vendor.order import Order, OrderProduct, parse_topping, place_order
from .vendor.status import VendorError
from .vendor.store import check_service
from .vendor.transport import VendorClient


console = Console()
err_console = Console(stderr=True)
logger = get_logger(__name__)


class PizzaboxGroup(click.Group):
    """Turns pizzabox errors into a one-line message and exit code 1."""

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except PizzaboxError as e:
            logger.debug(f"command failed: {e!r}")
            err_console.print(f"[red]Error:[/red] {escape(str(e))}")
            ctx.exit(1)


def report_warning(warning: Optional[VendorError]) -> None:
    if warning is not None:
        err_console.print(f"[yellow]{escape(str(warning))}[/yellow]")


def _app(ctx: click.Context) -> AppContext:
    return ctx.find_object(AppContext)


@click.group(cls=PizzaboxGroup, invoke_without_command=True)
@click.option("--address", "-A", default="", help="an address name stored with 'pizzabox address --new'")
@click.option("--service", default="", help="select a service, either 'Delivery' or 'Carryout'")
@click.option("--delete-menu", is_flag=True, help="delete the menus stored in cache")
@click.option("--log", "log_file", type=click.Path(dir_okay=False), help="write logs to this file")
@click.option("--verbose", "-v", is_flag=True, help="show debug logging")
@click.option("--store-location", "-L", is_flag=True, help="show the location of the nearest store")
@click.option("--dump-db", is_flag=True, hidden=True, help="dump the database to stdout as json")
@click.version_option(__version__, prog_name="pizzabox")
@click.pass_context
def cli(ctx, address, service, delete_menu, log_file, verbose, store_location, dump_db):
    """Order pizza from the command line."""
    manager = ConfigManager()
    setup_logging(
        "pizzabox",
        level="DEBUG" if verbose else "WARNING",
        file=True,
        log_file=Path(log_file) if log_file else manager.folder / "logs" / "pizzabox.log",
    )
    log_operation(logger, "cli", command=ctx.invoked_subcommand)

    config = manager.load()
    service = check_service(service) if service else ""
    app = AppContext.open(
        manager,
        client=VendorClient(timeout=config.timeout),
        address_name=address,
        service=service,
    )
    ctx.obj = app
    ctx.call_on_close(app.close)

    if delete_menu:
        removed = app.session.clear_menus()
        logger.info(f"removed {removed} cached menu(s)")

    if ctx.invoked_subcommand is not None:
        return
    if store_location:
        store = app.store()
        console.print(f"[bold]Store {store.store_id}[/bold] ({store.service})")
        console.print(escape(store.address_description))
        if store.phone:
            console.print(f"phone: {store.phone}")
    elif dump_db:
        dump(app.db, sys.stdout)
    elif not delete_menu:
        click.echo(ctx.get_help())


def _walk_categories(categories, depth=0):
    for category in categories:
        yield depth, category
        yield from _walk_categories(category.get("Categories") or [], depth + 1)


def _print_menu(menu: Menu, show_toppings: bool) -> None:
    for depth, category in _walk_categories(menu.categories()):
        name = category.get("Name") or category.get("Code", "")
        if name:
            console.print(f"{'  ' * depth}[bold cyan]{escape(name)}[/bold cyan]")
        for code in category.get("Products") or []:
            product = menu.products.get(code, {})
            label = f"[{code}]"
            console.print(f"{'  ' * (depth + 1)}{escape(label)} {escape(product.get('Name', ''))}")

    if show_toppings:
        table = Table(title="Toppings")
        table.add_column("Group")
        table.add_column("Code")
        table.add_column("Name")
        for group, toppings in sorted(menu.toppings.items()):
            for code, topping in sorted(toppings.items()):
                table.add_row(group, code, topping.get("Name", ""))
        console.print(table)


@cli.command()
@click.argument("code", required=False)
@click.option("--toppings", is_flag=True, help="also list the available toppings")
@click.pass_context
def menu(ctx, code, toppings):
    """Show the menu of the nearest store, or one item by CODE."""
    app = _app(ctx)
    store_menu = app.session.menu_for(app.store())
    if not code:
        _print_menu(store_menu, toppings)
        return

    item = store_menu.find_item(code)
    if item is None:
        raise NotFoundError(f"no menu item with code {code}", key=code)
    label = f"[{item.code}]"
    console.print(f"[bold]{escape(item.name)}[/bold] {escape(label)} ({item.kind})")
    if item.description:
        console.print(escape(item.description))
    if item.price:
        console.print(f"price: {item.price}")
    for variant in item.data.get("Variants") or []:
        console.print(f"  variant: {variant}")


def _new_order(app: AppContext, name: str) -> Order:
    config = app.config
    store = app.store()
    first, _, last = config.name.partition(" ")
    return Order(
        name=name,
        store_id=store.store_id,
        service_method=app.service_method(),
        address=app.address(),
        first_name=first,
        last_name=last,
        email=config.email,
        phone=config.phone,
    )


def _topped_product(order: Order, product_code: Optional[str]) -> OrderProduct:
    if product_code is None:
        if not order.products:
            raise ValidationError("no product to change toppings on", field="topping")
        return order.products[-1]
    product = order.get_product(product_code)
    if product is None:
        raise NotFoundError(f"order {order.name} has no product {product_code}", key=product_code)
    return product


def _apply_toppings(order: Order, product_code: Optional[str],
                    add: Tuple[str, ...], remove: Tuple[str, ...]) -> None:
    if not add and not remove:
        return
    product = _topped_product(order, product_code)
    for spec in add:
        product.add_topping(**parse_topping(spec))
    for code in remove:
        product.remove_topping(code)


@cli.command()
@click.argument("name", required=False)
@click.option("--new", "create", is_flag=True, help="create a new order called NAME")
@click.option("--add", "-a", "add", multiple=True, help="add a product by code")
@click.option("--qty", default=1, show_default=True, help="quantity for added products")
@click.option("--product", "-p", default=None, help="product that --topping and --remove-topping apply to")
@click.option("--topping", "-t", multiple=True, help="CODE[:full|left|right[:amount]]")
@click.option("--remove-topping", "-R", "untopping", multiple=True, help="take a topping off by code")
@click.option("--remove", "-r", multiple=True, help="remove a product by code")
@click.option("--delete", "-d", is_flag=True, help="delete the order")
@click.option("--validate", is_flag=True, help="send the order to be price-checked")
@click.option("--verbose", "-v", is_flag=True, help="show every order in full")
@click.pass_context
def cart(ctx, name, create, add, qty, product, topping, untopping, remove, delete, validate, verbose):
    """Manage saved orders."""
    app = _app(ctx)
    out = click.get_text_stream("stdout")
    if not name:
        print_orders(app.db, out, verbose=verbose, color="\033[01;34m" if console.is_terminal else "")
        return

    if delete:
        delete_order(name, app.db)
        console.print(f"[green]deleted order {escape(name)}[/green]")
        return

    if create and app.db.exists(order_key(name)):
        raise ValidationError(f"order {name} already exists", field="name", value=name)

    order = _new_order(app, name) if create else get_order(name, app.db)
    changed = create
    for code in add:
        order.add_product(code, qty)
        changed = True
    for code in remove:
        if not order.remove_product(code):
            raise NotFoundError(f"order {name} has no product {code}", key=code)
        changed = True
    if topping or untopping:
        _apply_toppings(order, product, topping, untopping)
        changed = True

    if changed or validate:
        report_warning(save_order(order, out, app.db, app.client))
    else:
        click.echo(format_order(order))


@cli.command()
@click.argument("name")
@click.option("--cvv", type=int, prompt=True, hide_input=True, help="card security code")
@click.option("--yes", "-y", is_flag=True, help="do not ask for confirmation")
@click.pass_context
def order(ctx, name, cvv, yes):
    """Send the saved order NAME to the store."""
    app = _app(ctx)
    saved = get_order(name, app.db)
    card = new_card(app.config.card.number, app.config.card.expiration, cvv)
    click.echo(format_order(saved))
    if not yes and not click.confirm("Place this order?"):
        console.print("[yellow]Aborted[/yellow]")
        return

    report_warning(place_order(saved, card, app.client))
    save_order(saved, click.get_text_stream("stdout"), app.db)
    console.print(f"[green]order placed[/green] (id {escape(saved.order_id or 'unknown')})")


@cli.command()
@click.option("--new", "create", is_flag=True, help="add a new named address")
@click.option("--delete", "-d", "delete", default=None, help="delete a named address")
@click.pass_context
def address(ctx, create, delete):
    """Manage named addresses."""
    app = _app(ctx)
    if delete:
        delete_address(app.db, delete)
        return

    if create:
        name = click.prompt("Address Name")
        user_address = UserAddress(
            street=click.prompt("Street Address"),
            city_name=click.prompt("City Name"),
            region=click.prompt("State Code"),
            postal_code=click.prompt("Zipcode"),
        )
        save_address(app.db, name, from_user_address(user_address))
        return

    for name in list_addresses(app.db):
        click.echo(f"{name}:")
        click.echo(get_address(app.db, name).format(indent=2))


@cli.group(invoke_without_command=True)
@click.option("--file", "-f", "show_file", is_flag=True, help="show the path to the config file")
@click.option("--dir", "-d", "show_dir", is_flag=True, help="show the config directory path")
@click.option("--edit", "-e", is_flag=True, help="open the config file in a text editor")
@click.pass_context
def config(ctx, show_file, show_dir, edit):
    """Configure pizzabox."""
    if ctx.invoked_subcommand is not None:
        return
    manager = _app(ctx).manager
    if show_file:
        click.echo(str(manager.config_path))
    elif show_dir:
        click.echo(str(manager.folder))
    elif edit:
        if not manager.config_path.exists():
            manager.save()
        click.edit(filename=str(manager.config_path))
    else:
        manager.display()


@config.command(name="get")
@click.argument("keys", nargs=-1, required=True)
@click.pass_context
def config_get(ctx, keys: List[str]):
    """Print config variables."""
    manager = _app(ctx).manager
    for key in keys:
        try:
            click.echo(manager.get(key))
        except KeyError as e:
            raise click.ClickException(e.args[0])


@config.command(name="set")
@click.argument("pairs", nargs=-1, required=True)
@click.pass_context
def config_set(ctx, pairs: List[str]):
    """Change config variables, given as KEY=VALUE ('-' clears a value)."""
    manager = _app(ctx).manager
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key or not value:
            raise click.ClickException("use '<key>=<value>' format (no spaces), use <key>='-' to set as empty")
        if value == "-":
            value = ""
        try:
            manager.set(key, value)
        except KeyError as e:
            raise click.ClickException(e.args[0])
    manager.save()


cli.add_command(config, name="conf")


def main():
    """Main CLI entry point."""
    cli(prog_name="pizzabox")


if __name__ == "__main__":
    main()
