"""gate/ -- Visitor identity gate for Web Team Explorer.

Holds the single optional Identity (username + job title) that unlocks the
data pages. The identity lives client-side in the signed session cookie;
nothing is persisted on the server.

Layer rule: gate/ imports only stdlib + third-party libraries.
It does NOT import from api/, web/, core/, or cache/.
api/ and web/ import from gate/, not the other way around.
"""
