"""
Domain modules.

- shared: leveling curve, constants, domain exceptions and service bases
- skills: rate table, progression engine and reconciliation service
- player: registration, presence and inventory reads
- equipment: catalog and equip/unequip
"""
