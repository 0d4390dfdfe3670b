HELP_TEXT = '''
==================== HELP =====================
Library:
  l                              List components (current filters and sort)
  s [-v TEXT] [-c CAT] [-p PKGS] [-o SORT] [-r MODE]
                                 Set filters and list; 's' alone clears them
                                 PKGS: comma list of smd,through-hole,bga,qfn
                                 SORT: name|category|package|date|usage
                                 MODE: all|favorites|recent
  c                              List categories with component counts
  a                              Add new component (interactive)
  info -id ID                    Show component details and specifications
  u -id ID -f FIELD -v VAL       Update field of a component you own
  d -id ID                       Delete a component you own
  fav -id ID                     Toggle favorite
  use -id ID                     Record one use of a component

Import / Export:
  ex FILE                        Export your components to a JSON file
  im FILE                        Import components from a JSON file

Account:
  login                          Log in
  register                       Create an account
  logout                         Log out
  who                            Show current user

  f                              List all component fields
  h                              Show this help
  x                              Exit program
==============================================='''

FIELDS = [
    "id", "name", "category", "package", "value", "description",
    "manufacturer", "datasheet", "tags", "specifications", "user_id",
    "created_at", "updated_at", "usage_count", "is_favorite"
]

SPEC_PROMPT = "Specifications as 'parameter; value; unit' (empty line to finish, '-' removes last row)"
