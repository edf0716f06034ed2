from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.configuration import parametres_application
from app.core.erreurs import ErreurValidation, Interdit, Introuvable, PlatInvalide, StatutInvalide
from app.core.transactions import executer_transaction
from app.domaine.enums.types import Role, StatutCommande
from app.domaine.identite import Identite
from app.domaine.modeles.auth import User
from app.domaine.modeles.catalogue import Plat
from app.domaine.modeles.commande import Commande, LigneCommande


logger = logging.getLogger(__name__)


_CENTIME = Decimal("0.01")

# Table des transitions autorisées : (rôle, statut courant) -> statuts cibles.
# Tout couple absent est refusé (Interdit), quel que soit le rôle.
TRANSITIONS_COMMANDE: dict[tuple[Role, StatutCommande], frozenset[StatutCommande]] = {
    (Role.ADMIN, StatutCommande.PENDING): frozenset({StatutCommande.ACCEPTED, StatutCommande.CANCELLED}),
    (Role.ADMIN, StatutCommande.ACCEPTED): frozenset({StatutCommande.EN_COURS, StatutCommande.CANCELLED}),
    (Role.ADMIN, StatutCommande.EN_COURS): frozenset({StatutCommande.LIVREE, StatutCommande.CANCELLED}),
    (Role.ADMIN, StatutCommande.LIVREE): frozenset({StatutCommande.CANCELLED}),
    (Role.LIVREUR, StatutCommande.ACCEPTED): frozenset({StatutCommande.EN_COURS}),
    (Role.LIVREUR, StatutCommande.EN_COURS): frozenset({StatutCommande.LIVREE}),
    (Role.CLIENT, StatutCommande.PENDING): frozenset({StatutCommande.CANCELLED}),
}

# Un livreur ne voit (et ne manipule) que ces statuts.
STATUTS_VISIBLES_LIVREUR: frozenset[StatutCommande] = frozenset(
    {StatutCommande.ACCEPTED, StatutCommande.EN_COURS}
)


@dataclass(frozen=True)
class LigneDemandee:
    plat_id: int
    quantite: int


def arrondir_total(montant: Decimal) -> Decimal:
    """Arrondi au centime, demi vers l’extérieur (ROUND_HALF_UP sur Decimal)."""

    return montant.quantize(_CENTIME, rounding=ROUND_HALF_UP)


def calculer_total(lignes: list[LigneDemandee], prix_par_plat: dict[int, Decimal]) -> Decimal:
    total = sum(
        (Decimal(prix_par_plat[ligne.plat_id]) * ligne.quantite for ligne in lignes),
        start=Decimal("0"),
    )
    return arrondir_total(total)


def transitions_autorisees(role: Role, statut_courant: StatutCommande) -> frozenset[StatutCommande]:
    return TRANSITIONS_COMMANDE.get((role, statut_courant), frozenset())


def _message_refus(role: Role, statut_courant: StatutCommande) -> str:
    if role is Role.LIVREUR:
        if statut_courant is StatutCommande.PENDING:
            return "Cette commande n'a pas encore été acceptée par l'administrateur."
        if statut_courant is StatutCommande.ACCEPTED:
            return "Vous ne pouvez que prendre en charge cette commande."
        if statut_courant is StatutCommande.EN_COURS:
            return "Vous ne pouvez que marquer cette commande comme livrée."
    if role is Role.CLIENT:
        return "Vous ne pouvez annuler que vos propres commandes en attente."
    return f"Transition interdite depuis le statut {statut_courant.value}."


def _options_projection():
    return (
        selectinload(Commande.lignes).selectinload(LigneCommande.plat),
        selectinload(Commande.user),
    )


class ServiceCommande:
    """Moteur de commandes.

    Principes :
    - Le total est calculé une seule fois (création) puis n’est plus jamais recalculé.
    - Le statut ne change que via `changer_statut`, contrôlé par `TRANSITIONS_COMMANDE`.
    - Création atomique : un seul plat invalide => aucune commande écrite.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def creer(
        self,
        *,
        lignes: list[LigneDemandee],
        acteur: Identite | None,
        adresse: str | None = None,
        telephone: str | None = None,
        notes: str | None = None,
        pour_user_id: int | None = None,
    ) -> Commande:
        """Crée une commande PENDING et retourne sa projection (plats, client).

        `pour_user_id` : commande passée pour le compte d’un client (ADMIN uniquement).
        """

        self._valider_lignes(lignes)
        user_id = self._proprietaire(acteur, pour_user_id)
        if pour_user_id is not None and await self._session.get(User, pour_user_id) is None:
            raise Introuvable("Client non trouvé.")

        lignes_fusionnees = self._fusionner(lignes)
        plats = await self._charger_plats_commandables(lignes_fusionnees)
        total = calculer_total(lignes_fusionnees, {p.id: p.prix for p in plats.values()})

        async def _ecrire() -> int:
            commande = Commande(
                user_id=user_id,
                statut=StatutCommande.PENDING,
                total=total,
                adresse=adresse or None,
                telephone=telephone or None,
                notes=notes or None,
                lignes=[LigneCommande(plat_id=l.plat_id, quantite=l.quantite) for l in lignes_fusionnees],
            )
            self._session.add(commande)
            await self._session.flush()
            return commande.id

        commande_id = await executer_transaction(self._session, action=_ecrire)

        logger.info(
            "commande_creee commande_id=%s user_id=%s total=%s lignes=%s",
            commande_id,
            user_id,
            total,
            len(lignes_fusionnees),
        )
        return await self._charger(commande_id)

    async def changer_statut(
        self,
        *,
        commande_id: int,
        nouveau_statut: str,
        acteur: Identite | None,
    ) -> Commande:
        cible = self._parser_statut(nouveau_statut)

        commande = await self._session.get(Commande, commande_id)
        if commande is None:
            raise Introuvable("Commande non trouvée.")

        statut_courant = commande.statut

        if acteur is None:
            raise Interdit("Authentification requise pour modifier une commande.")

        if acteur.role is Role.CLIENT and not acteur.possede(commande.user_id):
            logger.info(
                "commande_transition_refusee commande_id=%s user_id=%s motif=proprietaire",
                commande_id,
                acteur.user_id,
            )
            raise Interdit("Vous ne pouvez annuler que vos propres commandes.")

        if cible not in transitions_autorisees(acteur.role, statut_courant):
            logger.info(
                "commande_transition_refusee commande_id=%s role=%s de=%s vers=%s",
                commande_id,
                acteur.role.value,
                statut_courant.value,
                cible.value,
            )
            raise Interdit(_message_refus(acteur.role, statut_courant))

        async def _ecrire() -> None:
            commande.statut = cible
            await self._session.flush()

        await executer_transaction(self._session, action=_ecrire)

        logger.info(
            "commande_transition commande_id=%s role=%s de=%s vers=%s",
            commande_id,
            acteur.role.value,
            statut_courant.value,
            cible.value,
        )
        return await self._charger(commande_id)

    async def lister(
        self,
        *,
        acteur: Identite,
        statut: str | None = None,
    ) -> list[Commande]:
        """Liste filtrée par rôle (CLIENT : les siennes ; LIVREUR : ACCEPTED/EN_COURS ; ADMIN : tout)."""

        stmt = select(Commande).options(*_options_projection())

        if acteur.role is Role.CLIENT:
            stmt = stmt.where(Commande.user_id == acteur.user_id)
        elif acteur.role is Role.LIVREUR:
            stmt = stmt.where(Commande.statut.in_(STATUTS_VISIBLES_LIVREUR))

        if statut is not None:
            stmt = stmt.where(Commande.statut == self._parser_statut(statut))

        stmt = stmt.order_by(Commande.cree_le.desc(), Commande.id.desc())
        res = await self._session.execute(stmt)
        return list(res.scalars().all())

    async def obtenir(self, *, commande_id: int, acteur: Identite) -> Commande:
        commande = await self._charger(commande_id)

        if acteur.role is Role.CLIENT and not acteur.possede(commande.user_id):
            raise Interdit("Accès interdit.")

        return commande

    async def _charger(self, commande_id: int) -> Commande:
        res = await self._session.execute(
            select(Commande)
            .where(Commande.id == commande_id)
            .options(*_options_projection())
            .execution_options(populate_existing=True)
        )
        commande = res.scalar_one_or_none()
        if commande is None:
            raise Introuvable("Commande non trouvée.")
        return commande

    async def _charger_plats_commandables(self, lignes: list[LigneDemandee]) -> dict[int, Plat]:
        ids = [l.plat_id for l in lignes]
        res = await self._session.execute(select(Plat).where(Plat.id.in_(ids)))
        plats = {p.id: p for p in res.scalars().all()}

        # Ordre des lignes : le premier plat fautif est celui signalé.
        for plat_id in ids:
            plat = plats.get(plat_id)
            if plat is None:
                raise PlatInvalide(f"Plat #{plat_id} non trouvé.", plat_id=plat_id)
            if not plat.disponible:
                raise PlatInvalide(f"Le plat \"{plat.nom}\" n'est plus disponible.", plat_id=plat_id)

        return plats

    @staticmethod
    def _proprietaire(acteur: Identite | None, pour_user_id: int | None) -> int | None:
        if acteur is None:
            if not parametres_application.commandes_anonymes_autorisees:
                raise Interdit("Les commandes anonymes ne sont pas autorisées.")
            if pour_user_id is not None:
                raise Interdit("Seul un administrateur peut commander pour un autre client.")
            return None

        if acteur.role is Role.LIVREUR:
            raise Interdit("Un livreur ne peut pas passer de commande.")

        if pour_user_id is not None and pour_user_id != acteur.user_id:
            if not acteur.est_admin:
                raise Interdit("Seul un administrateur peut commander pour un autre client.")
            return pour_user_id

        return acteur.user_id

    @staticmethod
    def _fusionner(lignes: list[LigneDemandee]) -> list[LigneDemandee]:
        """Regroupe les doublons d’un même plat (quantités additionnées)."""

        quantites: OrderedDict[int, int] = OrderedDict()
        for ligne in lignes:
            quantites[ligne.plat_id] = quantites.get(ligne.plat_id, 0) + ligne.quantite
        return [LigneDemandee(plat_id=p, quantite=q) for p, q in quantites.items()]

    @staticmethod
    def _valider_lignes(lignes: list[LigneDemandee]) -> None:
        if not lignes:
            raise ErreurValidation("La commande doit contenir au moins un article.")

        for ligne in lignes:
            if ligne.quantite is None or int(ligne.quantite) <= 0:
                raise ErreurValidation(
                    "La quantité doit être un entier positif.",
                    details={"dishId": ligne.plat_id},
                )

    @staticmethod
    def _parser_statut(valeur: str) -> StatutCommande:
        try:
            return StatutCommande(valeur)
        except ValueError:
            raise StatutInvalide(
                "Statut invalide.",
                statuts_valides=[s.value for s in StatutCommande],
            ) from None
