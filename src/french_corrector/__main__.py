"""
Point d'entrée en ligne de commande.

Commandes :
    correct      Corrige un texte (argument ou fichiers) et l'enregistre
    history      Liste les corrections de l'utilisateur
    delete       Supprime une correction
    advice       Conseils d'étude à partir de l'historique
    model        Affiche, liste ou change le modèle actif
    serve-proxy  Lance le proxy serveur
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

import uvicorn
from tqdm import tqdm

from .config import AVAILABLE_MODELS, Settings, load_settings, lock_config
from .correction import CorrectionPipeline, StudyAdvisor, collect_items
from .correction.advisor import NOTHING_TO_ANALYZE
from .exceptions import CorrectorError
from .gateway import GeminiGateway, ModelGateway, ProxyGateway
from .logger import LogSession
from .model_config import ModelConfigService, ModelNameCache
from .models import CorrectionResult, StudyAdvice
from .proxy import create_app
from .stores import ConfigStore, CorrectionStore


def build_gateway(settings: Settings, config_service: ModelConfigService) -> ModelGateway:
    """Passerelle proxy si CORRECTOR_PROXY_URL est défini, directe sinon."""
    if settings.proxy_url:
        return ProxyGateway(
            settings.proxy_url,
            config_service,
            user_id=settings.user_id,
            timeout=settings.timeout,
        )
    return GeminiGateway(
        model_name=config_service.get_current_model_name(settings.user_id),
        api_key=settings.require_api_key(),
        base_url=settings.base_url,
        timeout=settings.timeout,
    )


def print_result(result: CorrectionResult) -> None:
    print(result.corrected_text)
    if result.explanation:
        print(f"\n{result.explanation}")
    if not result.corrections:
        return
    print(f"\n{len(result.corrections)} correction(s) :")
    for item in result.corrections:
        label = item.short_explanation or item.explanation
        print(f"  [{item.type.value}] {item.original} → {item.corrected}")
        if label:
            print(f"      {label}")


def print_advice(advice: StudyAdvice) -> None:
    print(advice.summary)
    for entry in advice.corrections:
        print(f"\n## {entry.title} ({entry.category})")
        print(entry.content)
        for example in entry.examples:
            print(f"  - {example.original} → {example.corrected} : {example.explanation}")


def cmd_correct(args, settings: Settings, services: dict) -> int:
    pipeline = CorrectionPipeline(
        build_gateway(settings, services["config"]),
        store=None if args.no_save else services["corrections"],
    )

    texts: list[tuple[Optional[Path], str]] = []
    if args.text:
        texts.append((None, args.text))
    for path in args.files or []:
        texts.append((path, path.read_text(encoding="utf-8")))
    if not texts:
        texts.append((None, sys.stdin.read()))

    for path, text in tqdm(texts, desc="Correction", unit="texte", disable=len(texts) < 2):
        result, _ = pipeline.correct_and_save(text, settings.user_id)
        if args.json:
            print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
            continue
        if path is not None:
            tqdm.write(f"=== {path} ===")
        print_result(result)
    return 0


def cmd_history(args, settings: Settings, services: dict) -> int:
    history = services["corrections"].list(settings.user_id)
    if args.json:
        print(json.dumps([stored.to_dict() for stored in history], ensure_ascii=False, indent=2))
        return 0
    if not history:
        print("Aucune correction enregistrée.")
        return 0
    for stored in history:
        preview = stored.original_text.strip().replace("\n", " ")[:60]
        print(
            f"{stored.id}  {stored.created_at:%Y-%m-%d %H:%M}  "
            f"{len(stored.corrections):>3} correction(s)  {preview}"
        )
    return 0


def cmd_delete(args, settings: Settings, services: dict) -> int:
    if not services["corrections"].delete(args.id):
        print(f"Correction introuvable : {args.id}", file=sys.stderr)
        return 1
    print(f"Correction {args.id} supprimée.")
    return 0


def cmd_advice(args, settings: Settings, services: dict) -> int:
    items = collect_items(services["corrections"].list(settings.user_id), limit=args.limit)
    if items:
        advisor = StudyAdvisor(build_gateway(settings, services["config"]))
        advice = advisor.summarize(items)
    else:
        advice = StudyAdvice(summary=NOTHING_TO_ANALYZE)
    if args.json:
        print(json.dumps(advice.to_dict(), ensure_ascii=False, indent=2))
    else:
        print_advice(advice)
    return 0


def cmd_model(args, settings: Settings, services: dict) -> int:
    config_service: ModelConfigService = services["config"]
    if args.action == "list":
        for name in AVAILABLE_MODELS:
            print(name)
        return 0
    if args.action == "set":
        if not args.name:
            print("Nom du modèle manquant.", file=sys.stderr)
            return 1
        config = config_service.update_model_config(args.name, settings.user_id)
        print(f"Modèle actif : {config.model_name}")
        return 0

    config = config_service.get_model_config(settings.user_id)
    print(
        f"Modèle actif : {config.model_name} "
        f"(modifié le {config.updated_at:%Y-%m-%d %H:%M} par {config.updated_by})"
    )
    return 0


def cmd_serve_proxy(args, settings: Settings, services: dict) -> int:
    settings.require_api_key()
    uvicorn.run(create_app(settings, services["config"]), host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="french-corrector",
        description="Correction de textes français par un modèle génératif.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    correct = sub.add_parser("correct", help="Corriger un texte")
    correct.add_argument("text", nargs="?", help="Texte à corriger (stdin si absent)")
    correct.add_argument("-f", "--files", nargs="+", type=Path, help="Fichiers à corriger")
    correct.add_argument("--no-save", action="store_true", help="Ne pas enregistrer")
    correct.add_argument("--json", action="store_true", help="Sortie JSON")
    correct.set_defaults(handler=cmd_correct)

    history = sub.add_parser("history", help="Historique des corrections")
    history.add_argument("--json", action="store_true", help="Sortie JSON")
    history.set_defaults(handler=cmd_history)

    delete = sub.add_parser("delete", help="Supprimer une correction")
    delete.add_argument("id")
    delete.set_defaults(handler=cmd_delete)

    advice = sub.add_parser("advice", help="Conseils d'étude")
    advice.add_argument("--limit", type=int, default=None, help="Nombre max de corrections analysées")
    advice.add_argument("--json", action="store_true", help="Sortie JSON")
    advice.set_defaults(handler=cmd_advice)

    model = sub.add_parser("model", help="Modèle actif")
    model.add_argument("action", choices=["show", "set", "list"], nargs="?", default="show")
    model.add_argument("name", nargs="?")
    model.set_defaults(handler=cmd_model)

    serve = sub.add_parser("serve-proxy", help="Lancer le proxy serveur")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8080)
    serve.set_defaults(handler=cmd_serve_proxy)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    Point d'entrée principal.

    Les erreurs du correcteur sont affichées sous forme de message lisible
    (code de sortie 1) ; les autres exceptions sont propagées.
    """
    args = build_parser().parse_args(argv)
    lock_config()
    try:
        settings = load_settings()
        LogSession.configure(Path(settings.data_dir) / "logs")
        cache = ModelNameCache()
        services = {
            "corrections": CorrectionStore(settings.data_dir),
            "config": ModelConfigService(
                ConfigStore(settings.data_dir), cache, default_model_name=settings.model_name
            ),
        }
        return args.handler(args, settings, services)
    except CorrectorError as e:
        print(f"Erreur : {e.user_message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
