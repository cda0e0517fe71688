"""Command line interface for the ClubDesk football club dashboard."""
from __future__ import annotations

import argparse
import shlex
import sys
from datetime import datetime
from typing import Callable, Dict, List, Optional

from . import __version__, config, models, services, storage

DATETIME_HELP = "Format ISO (AAAA-MM-JJTHH:MM)."


class CommandError(RuntimeError):
    """Raised when CLI validation fails."""


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError as exc:
        raise CommandError(f"Date invalide: {value}") from exc


def _contribution(value: str) -> Dict[str, str]:
    """Parse ``KEY:COUNT`` (``KEY`` alone counts once)."""
    key, _, count = value.rpartition(":")
    if not key:
        key, count = value, "1"
    if not key.strip() or not count.strip().isdigit():
        raise argparse.ArgumentTypeError(f"Contribution invalide: {value}")
    return {"key": key.strip(), "count": count.strip()}


def _contributors(club: List[Dict[str, str]], opponents: List[Dict[str, str]], count_key: str) -> List[Dict]:
    entries: List[Dict] = []
    for item in club or []:
        if not item["key"].isdigit():
            raise CommandError(f"Identifiant de joueur invalide: {item['key']}")
        entries.append({"player_id": int(item["key"]), count_key: item["count"]})
    for item in opponents or []:
        entries.append({"player_name": item["key"], count_key: item["count"]})
    return entries


def _configure_player_commands(subparsers: argparse._SubParsersAction, service: services.ClubService) -> None:
    player_parser = subparsers.add_parser("players", help="Gérer les joueurs")
    player_sub = player_parser.add_subparsers(dest="players_command", required=True)

    add_player = player_sub.add_parser("add", help="Ajouter un joueur")
    add_player.add_argument("name", help="Nom complet")
    add_player.add_argument("category", help="Catégorie (ex: U15)")
    add_player.add_argument("--position", help="Poste")
    add_player.add_argument("--number", type=int, help="Numéro de maillot")
    add_player.add_argument("--gender", choices=models.GENDERS, default="Masculin")
    add_player.add_argument("--phone", help="Téléphone")

    def handle_add(args: argparse.Namespace) -> None:
        try:
            player = service.add_player(
                args.name,
                args.category,
                position=args.position,
                number=args.number,
                gender=args.gender,
                phone=args.phone,
            )
        except ValueError as exc:
            print(f"Erreur: {exc}")
            return
        print("Joueur créé:")
        print(f"  {services.format_person(player)} | {player.category} | #{player.number if player.number is not None else '-'}")

    add_player.set_defaults(func=handle_add)

    list_player = player_sub.add_parser("list", help="Lister les joueurs")
    list_player.add_argument("--search", help="Filtrer par nom")

    def handle_list(args: argparse.Namespace) -> None:
        players = service.search_players(args.search) if args.search else service.list_players()
        if not players:
            print("Aucun joueur enregistré.")
            return
        for player in players:
            print(f"- {services.format_person(player)} | {player.category} | {player.position or '-'}")

    list_player.set_defaults(func=handle_list)


def _configure_coach_commands(subparsers: argparse._SubParsersAction, service: services.ClubService) -> None:
    coach_parser = subparsers.add_parser("coaches", help="Gérer les entraîneurs")
    coach_sub = coach_parser.add_subparsers(dest="coaches_command", required=True)

    add_coach = coach_sub.add_parser("add", help="Ajouter un entraîneur")
    add_coach.add_argument("name", help="Nom complet")
    add_coach.add_argument("--category", default="", help="Catégorie encadrée")
    add_coach.add_argument("--specialty", help="Spécialité")
    add_coach.add_argument("--phone", help="Téléphone")

    def handle_add(args: argparse.Namespace) -> None:
        try:
            coach = service.add_coach(args.name, args.category, specialty=args.specialty, phone=args.phone)
        except ValueError as exc:
            print(f"Erreur: {exc}")
            return
        print("Entraîneur créé:")
        print(f"  {services.format_person(coach)} | {coach.category or '-'} | {coach.specialty or 'N/A'}")

    add_coach.set_defaults(func=handle_add)

    list_coach = coach_sub.add_parser("list", help="Lister les entraîneurs")

    def handle_list(_: argparse.Namespace) -> None:
        coaches = service.list_coaches()
        if not coaches:
            print("Aucun entraîneur enregistré.")
            return
        for coach in coaches:
            print(f"- {services.format_person(coach)} | {coach.category or '-'} | {coach.specialty or 'N/A'}")

    list_coach.set_defaults(func=handle_list)


def _configure_opponent_commands(subparsers: argparse._SubParsersAction, service: services.ClubService) -> None:
    opponent_parser = subparsers.add_parser("opponents", help="Gérer les équipes adverses")
    opponent_sub = opponent_parser.add_subparsers(dest="opponents_command", required=True)

    add_opponent = opponent_sub.add_parser("add", help="Ajouter une équipe adverse")
    add_opponent.add_argument("name", help="Nom de l'équipe")
    add_opponent.add_argument("--logo-url", dest="logo_url", help="URL du logo")

    def handle_add(args: argparse.Namespace) -> None:
        try:
            opponent = service.add_opponent(args.name, args.logo_url)
        except ValueError as exc:
            print(f"Erreur: {exc}")
            return
        print(f"Équipe adverse créée: [{opponent.id}] {opponent.name}")

    add_opponent.set_defaults(func=handle_add)

    list_opponent = opponent_sub.add_parser("list", help="Lister les équipes adverses")

    def handle_list(_: argparse.Namespace) -> None:
        opponents = service.list_opponents()
        if not opponents:
            print("Aucune équipe adverse enregistrée.")
            return
        for opponent in opponents:
            print(f"- [{opponent.id}] {opponent.name}")

    list_opponent.set_defaults(func=handle_list)


def _configure_event_commands(subparsers: argparse._SubParsersAction, service: services.ClubService) -> None:
    event_parser = subparsers.add_parser("events", help="Gérer le calendrier")
    event_sub = event_parser.add_subparsers(dest="events_command", required=True)

    add_event = event_sub.add_parser("add", help="Ajouter un événement")
    add_event.add_argument("type", help=f"Type ({', '.join(config.EVENT_TYPES)})")
    add_event.add_argument("category", help="Catégorie")
    add_event.add_argument("date", help=DATETIME_HELP)
    add_event.add_argument("location", help="Lieu (Domicile, Extérieur, ...)")
    add_event.add_argument("--opponent", type=int, dest="opponent_id", help="Id de l'équipe adverse")
    add_event.add_argument("--notes", help="Notes")

    def handle_add(args: argparse.Namespace) -> None:
        try:
            event = service.add_event(
                args.type,
                args.category,
                parse_datetime(args.date),
                args.location,
                opponent_id=args.opponent_id,
                notes=args.notes,
            )
        except (ValueError, CommandError) as exc:
            print(f"Erreur: {exc}")
            return
        print(f"Événement créé: [{event.id}] {service.event_title(event)} | {event.date:%d/%m/%Y %H:%M}")

    add_event.set_defaults(func=handle_add)

    list_event = event_sub.add_parser("list", help="Lister les événements")
    list_event.add_argument("--upcoming", action="store_true", help="Seulement les 5 prochains")

    def handle_list(args: argparse.Namespace) -> None:
        events = service.upcoming_events() if args.upcoming else service.list_events()
        if not events:
            print("Aucun événement.")
            return
        for event in events:
            score = ""
            if event.score_home is not None and event.score_away is not None:
                score = f" | {event.score_home}-{event.score_away}"
            print(f"- [{event.id}] {event.date:%d/%m/%Y %H:%M} | {service.event_title(event)} | {event.location}{score}")

    list_event.set_defaults(func=handle_list)

    score_event = event_sub.add_parser("score", help="Enregistrer le score d'un match")
    score_event.add_argument("event_id", type=int)
    score_event.add_argument("score_home", type=int, help="Buts de l'équipe à domicile")
    score_event.add_argument("score_away", type=int, help="Buts de l'équipe à l'extérieur")
    score_event.add_argument("--scorer", action="append", type=_contribution, help="ID_JOUEUR[:BUTS]")
    score_event.add_argument("--assist", action="append", type=_contribution, help="ID_JOUEUR[:PASSES]")
    score_event.add_argument("--opponent-scorer", action="append", type=_contribution, dest="opponent_scorer", help="NOM[:BUTS]")

    def handle_score(args: argparse.Namespace) -> None:
        try:
            event = service.record_score(
                args.event_id,
                args.score_home,
                args.score_away,
                scorers=_contributors(args.scorer, args.opponent_scorer, "goals"),
                assisters=_contributors(args.assist, [], "assists"),
            )
            statistics = service.event_statistics(event)
        except (ValueError, CommandError) as exc:
            print(f"Erreur: {exc}")
            return
        print(f"Score enregistré: {statistics.home.team} {event.score_home} - {event.score_away} {statistics.away.team} ({statistics.result})")

    score_event.set_defaults(func=handle_score)


def _configure_ledger_commands(
    subparsers: argparse._SubParsersAction,
    service: services.ClubService,
    kind: str,
) -> None:
    is_payment = kind == models.LEDGER_PAYMENT
    name = "payments" if is_payment else "salaries"
    owner_label = "joueur" if is_payment else "entraîneur"
    ledger_parser = subparsers.add_parser(name, help="Gérer les paiements" if is_payment else "Gérer les salaires")
    ledger_sub = ledger_parser.add_subparsers(dest=f"{name}_command", required=True)

    add_record = ledger_sub.add_parser("add", help="Créer un enregistrement")
    add_record.add_argument("owner_id", type=int, help=f"Id du {owner_label}")
    add_record.add_argument(
        "total_amount",
        nargs="?",
        default=config.DEFAULT_PAYMENT_AMOUNT if is_payment else config.DEFAULT_SALARY_AMOUNT,
        help=f"Montant total en {config.CURRENCY}",
    )
    add_record.add_argument("--description", help="Description")
    add_record.add_argument("--advance", dest="initial_amount", help="Avance versée")
    add_record.add_argument("--method", default="Espèces", choices=config.PAYMENT_METHODS)

    def handle_add(args: argparse.Namespace) -> None:
        try:
            if is_payment:
                record = service.add_payment(
                    args.owner_id,
                    args.total_amount,
                    args.description or config.DEFAULT_PAYMENT_DESCRIPTION,
                    initial_amount=args.initial_amount,
                    method=args.method,
                )
            else:
                record = service.add_salary(
                    args.owner_id,
                    args.total_amount,
                    args.description,
                    initial_amount=args.initial_amount,
                    method=args.method,
                )
        except ValueError as exc:
            print(f"Erreur: {exc}")
            return
        print("Enregistrement créé:")
        print(f"  {services.format_ledger(service.ledger_summary(kind, record.id))}")

    add_record.set_defaults(func=handle_add)

    pay_record = ledger_sub.add_parser("pay", help="Ajouter un versement")
    pay_record.add_argument("record_id", type=int)
    pay_record.add_argument("amount", help="Montant versé")
    pay_record.add_argument("--method", default="Espèces", choices=config.PAYMENT_METHODS)

    def handle_pay(args: argparse.Namespace) -> None:
        try:
            service.add_ledger_transaction(kind, args.record_id, args.amount, args.method)
        except ValueError as exc:
            print(f"Erreur: {exc}")
            return
        print("Versement enregistré:")
        print(f"  {services.format_ledger(service.ledger_summary(kind, args.record_id))}")

    pay_record.set_defaults(func=handle_pay)

    list_records = ledger_sub.add_parser("list", help="Lister par titulaire")

    def handle_list(_: argparse.Namespace) -> None:
        report = service.ledger_report(kind)
        if not report.owners:
            print("Aucun enregistrement.")
        for owner in report.owners:
            print(
                f"{owner.owner_name}: dû {services.format_amount(owner.total_due)} | "
                f"payé {services.format_amount(owner.total_paid)} | {owner.overall_status}"
            )
            for summary in owner.records:
                print(f"  - {services.format_ledger(summary)}")
        if report.skipped:
            print(f"{len(report.skipped)} enregistrement(s) ignoré(s).")

    list_records.set_defaults(func=handle_list)


def _configure_standings_commands(subparsers: argparse._SubParsersAction, service: services.ClubService) -> None:
    standings_parser = subparsers.add_parser("standings", help="Afficher le classement")
    standings_parser.add_argument("category", help="Catégorie")
    standings_parser.add_argument(
        "--competition", default=config.DEFAULT_COMPETITION, choices=config.COMPETITION_TYPES
    )

    def handle_standings(args: argparse.Namespace) -> None:
        table = service.standings(args.category, args.competition)
        print(f"{args.competition} - {args.category}")
        print(f"{'#':>2} {'Équipe':<24} {'J':>2} {'G':>2} {'N':>2} {'P':>2} {'BP':>3} {'BC':>3} {'Diff':>4} {'Pts':>3}")
        for position, row in enumerate(table.rows, start=1):
            print(
                f"{position:>2} {row.name:<24} {row.played:>2} {row.wins:>2} {row.draws:>2} {row.losses:>2} "
                f"{row.goals_for:>3} {row.goals_against:>3} {row.goal_difference:>4} {row.points:>3}"
            )

    standings_parser.set_defaults(func=handle_standings)


def build_parser(service: services.ClubService) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Gestion du club de football")
    parser.add_argument("--version", action="version", version=f"ClubDesk {__version__}")
    subparsers = parser.add_subparsers(dest="command")

    _configure_player_commands(subparsers, service)
    _configure_coach_commands(subparsers, service)
    _configure_opponent_commands(subparsers, service)
    _configure_event_commands(subparsers, service)
    _configure_ledger_commands(subparsers, service, models.LEDGER_PAYMENT)
    _configure_ledger_commands(subparsers, service, models.LEDGER_SALARY)
    _configure_standings_commands(subparsers, service)

    return parser


def dispatch_command(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    if getattr(args, "command", None) is None:
        parser.print_help()
        return
    handler: Callable[[argparse.Namespace], None] = getattr(args, "func", None)
    if handler is None:
        parser.print_help()
        return
    handler(args)


def run_interactive_shell(parser: argparse.ArgumentParser) -> None:
    print("Mode interactif ClubDesk.")
    print("Tapez les commandes comme en ligne de commande (ex.: 'players list').")
    print("Utilisez 'help' pour l'aide et 'exit' ou 'quit' pour quitter.\n")
    while True:
        try:
            raw = input("clubdesk> ").strip()
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("\nInterruption reçue. Fin du mode interactif.")
            break
        if not raw:
            continue
        lowered = raw.lower()
        if lowered in {"exit", "quit"}:
            print("À bientôt !")
            break
        if lowered in {"help", "?"}:
            parser.print_help()
            continue
        try:
            args = parser.parse_args(shlex.split(raw))
        except SystemExit:
            # argparse has already printed the error
            continue
        dispatch_command(parser, args)


def main(argv: Optional[list[str]] = None) -> None:
    config.configure_logging(config.LOG_LEVEL)
    storage.ensure_storage()
    service = services.ClubService()
    parser = build_parser(service)

    if argv is None:
        actual_args = sys.argv[1:]
    else:
        actual_args = argv

    if not actual_args:
        run_interactive_shell(parser)
        return

    args = parser.parse_args(actual_args)
    dispatch_command(parser, args)


if __name__ == "__main__":
    main()
